"""
Movies feature: MID generation, validation, transactional writes.
"""

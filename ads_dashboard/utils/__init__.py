"""
Вспомогательные утилиты
"""

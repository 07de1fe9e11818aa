"""
Хранилище данных
"""

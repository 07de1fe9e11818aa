"""
Ядро: обработка данных и хранилища строк
"""

"""
Внешние интерфейсы дашборда
"""

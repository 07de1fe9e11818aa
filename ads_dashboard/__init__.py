"""
Ads Dashboard - движок дневных метрик и сравнения периодов
"""
__version__ = "1.0.0"

"""
ORM модели для базы данных
"""
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, DateTime,
    Date, Numeric, ForeignKey, Index
)
from sqlalchemy.orm import relationship, validates
from .base import Base


class Project(Base):
    """
    Модель проекта (рекламный аккаунт)
    """
    __tablename__ = 'projects'

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    timezone = Column(String(64), nullable=False, default='America/Sao_Paulo')
    currency = Column(String(3), nullable=False, default='BRL')
    created_at = Column(DateTime, default=datetime.utcnow)

    # Связи
    daily_metrics = relationship("AdsDailyMetric", back_populates="project", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Project {self.id}: {self.name}>"

    def to_dict(self):
        """Преобразует модель в словарь"""
        return {
            'id': self.id,
            'name': self.name,
            'timezone': self.timezone,
            'currency': self.currency,
        }


class AdsDailyMetric(Base):
    """
    Модель дневной статистики объявления
    """
    __tablename__ = 'ads_daily_metrics'

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(String(64), ForeignKey('projects.id', ondelete='CASCADE'), nullable=False)
    date = Column(Date, nullable=False)

    # Сущности
    campaign_id = Column(String(64))
    ad_set_id = Column(String(64))
    ad_id = Column(String(64))

    # Аддитивные метрики
    spend = Column(Numeric(12, 2), default=0)
    impressions = Column(Integer, default=0)
    clicks = Column(Integer, default=0)
    reach = Column(Integer, default=0)
    conversions = Column(Numeric(12, 2), default=0)
    conversion_value = Column(Numeric(12, 2), default=0)
    messaging_replies = Column(Integer, default=0)
    profile_visits = Column(Integer, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)

    # Связи
    project = relationship("Project", back_populates="daily_metrics")

    __table_args__ = (
        Index('idx_ads_daily_metrics_project_date', 'project_id', 'date'),
    )

    @validates('spend', 'conversion_value', 'conversions')
    def validate_positive_money(self, key, value):
        """
        Валидация денежных полей - не могут быть отрицательными

        Raises:
            ValueError: если значение отрицательное
        """
        if value is not None and value < 0:
            raise ValueError(f"{key} не может быть отрицательным: {value}")
        return value

    @validates('impressions', 'clicks', 'reach', 'messaging_replies', 'profile_visits')
    def validate_counts(self, key, value):
        """
        Валидация счетчиков - не могут быть отрицательными

        Raises:
            ValueError: если значение отрицательное
        """
        if value is not None and value < 0:
            raise ValueError(f"{key} не может быть отрицательным: {value}")
        return value

    def __repr__(self):
        return f"<AdsDailyMetric {self.project_id} {self.date} ad={self.ad_id}>"

    def to_dict(self):
        """Преобразует модель в словарь для RawDailyRow"""
        return {
            'date': self.date,
            'campaign_id': self.campaign_id,
            'ad_set_id': self.ad_set_id,
            'ad_id': self.ad_id,
            'spend': float(self.spend) if self.spend is not None else None,
            'impressions': self.impressions,
            'clicks': self.clicks,
            'reach': self.reach,
            'conversions': float(self.conversions) if self.conversions is not None else None,
            'conversion_value': float(self.conversion_value) if self.conversion_value is not None else None,
            'messaging_replies': self.messaging_replies,
            'profile_visits': self.profile_visits,
        }

"""
Исключения движка метрик
"""
from datetime import date
from typing import Optional


class MetricsEngineError(Exception):
    """Базовое исключение движка"""
    pass


class InvalidPreset(MetricsEngineError, ValueError):
    """Неизвестный ключ пресета периода"""

    def __init__(self, preset: str):
        self.preset = preset
        super().__init__(f"Unknown date preset: {preset!r}")


class InvalidRange(MetricsEngineError, ValueError):
    """Некорректные границы произвольного периода"""

    def __init__(self, message: str, since: Optional[date] = None, until: Optional[date] = None):
        self.since = since
        self.until = until
        super().__init__(message)


class RowStoreError(MetricsEngineError):
    """Ошибка хранилища строк (сеть, БД, невалидный ответ)"""
    pass


class FetchFailure(MetricsEngineError):
    """
    Пагинация прервалась ошибкой хранилища.

    Не пробрасывается из фетчера: прикладывается к частичному
    результату, чтобы вызывающий код показал "неполные данные".
    """

    def __init__(
        self,
        project_id: str,
        since: date,
        until: date,
        offset: int,
        rows_collected: int,
        cause: Optional[BaseException] = None
    ):
        self.project_id = project_id
        self.since = since
        self.until = until
        self.offset = offset
        self.rows_collected = rows_collected
        self.cause = cause
        super().__init__(
            f"Row fetch failed for project {project_id} ({since} - {until}) "
            f"at offset {offset} after {rows_collected} rows: {cause}"
        )


class PaginationLimitExceeded(MetricsEngineError):
    """Превышен лимит страниц при пагинации"""

    def __init__(self, project_id: str, max_pages: int, rows_collected: int):
        self.project_id = project_id
        self.max_pages = max_pages
        self.rows_collected = rows_collected
        super().__init__(
            f"Pagination for project {project_id} exceeded {max_pages} pages "
            f"({rows_collected} rows collected)"
        )


class ProjectNotFound(MetricsEngineError):
    """Проект отсутствует в хранилище"""

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")

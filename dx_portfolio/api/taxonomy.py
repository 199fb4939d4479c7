"""
API endpoints для таксономий (data/config.json).

- GET /config               - весь конфиг (статусы, приоритеты, блокеры)
- GET /config/{kind}/{key}  - настройки одного ключа

kind: statuses | priorities | blockers.
Неизвестный ключ - не ошибка: возвращается пустой объект.
"""

from typing import Any, Literal

from fastapi import APIRouter, Depends

from ..context import AppContext
from .dependencies import get_context

router = APIRouter(prefix="/config", tags=["config"])


@router.get("", summary="Таксономии")
async def get_config(context: AppContext = Depends(get_context)) -> dict[str, Any]:
    return context.config.to_json_dict()


@router.get("/{kind}/{key}", summary="Настройки одного ключа таксономии")
async def lookup(
    kind: Literal["statuses", "priorities", "blockers"],
    key: str,
    context: AppContext = Depends(get_context),
) -> dict[str, Any]:
    """
    Пример:
    ```
    GET /config/statuses/in-progress
    -> {"label": "In progress", "badgeClass": "badge-in-progress", ...}
    GET /config/statuses/unknown
    -> {}
    ```
    """
    return context.config.lookup(kind, key)

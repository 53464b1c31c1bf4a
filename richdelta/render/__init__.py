"""
render

Проекция delta-документа в HTML (только вывод, без обратной связи с моделью).
"""

from .html import build_href, render_html

__all__ = ["build_href", "render_html"]

"""
Extract candidate interactive forms from a page's markup.
"""
# @file purpose: Find HTML forms and their named fields.

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

from ..core.types import FormCandidate, FormField, is_absolute_url
from .spec_detector import origin_of

IGNORED_INPUT_TYPES = frozenset({"submit", "reset", "button", "hidden"})


def _resolve_action(action: str | None, origin: str) -> str:
    action = (action or "").strip()
    if is_absolute_url(action):
        return action
    if not action.startswith("/"):
        action = f"/{action}"
    return f"{origin}{action}"


def _attr(el: Tag, name: str) -> str | None:
    value = el.get(name)
    if isinstance(value, list):  # class-like multi-valued attributes
        value = " ".join(value)
    return value


def _fields(form: Tag) -> list[FormField]:
    fields: list[FormField] = []
    for el in form.find_all(["input", "textarea", "select"]):
        name = _attr(el, "name")
        if not name:
            continue
        ftype = (_attr(el, "type") or "text").strip().lower() or "text"
        if ftype in IGNORED_INPUT_TYPES:
            continue
        fields.append(FormField(name=name, type=ftype, placeholder=_attr(el, "placeholder")))
    return fields


def _submit_label(form: Tag) -> str | None:
    control = form.select_one('[type="submit"], button')
    if control is None:
        return None
    if control.name == "input":
        label = _attr(control, "value") or ""
    else:
        label = control.get_text()
    return label.strip() or None


def analyze_html(html: str, base_url: str) -> list[FormCandidate]:
    """
    One FormCandidate per <form> that has at least one named, user-editable
    field. Relative actions resolve against the origin of base_url.
    """
    origin = origin_of(base_url)
    soup = BeautifulSoup(html, "html.parser")

    candidates: list[FormCandidate] = []
    for form in soup.find_all("form"):
        fields = _fields(form)
        if not fields:
            continue
        method = (_attr(form, "method") or "GET").strip().upper()
        candidates.append(
            FormCandidate(
                form_action=_resolve_action(_attr(form, "action"), origin),
                method="POST" if method == "POST" else "GET",
                fields=fields,
                submit_label=_submit_label(form),
            )
        )
    return candidates

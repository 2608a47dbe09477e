import re

from dev_browser.dom.views import DOMRect

_WHITESPACE_RE = re.compile(r'\s+')


def normalize_whitespace(text: str) -> str:
	return _WHITESPACE_RE.sub(' ', text).strip()


def truncate_text(text: str, max_length: int, ellipsis: str = '...') -> str:
	"""Collapse whitespace and cut to `max_length` characters, appending `ellipsis` when cut."""
	text = normalize_whitespace(text)
	if len(text) > max_length:
		return text[:max_length] + ellipsis
	return text


def get_containment_percentage(a: DOMRect, b: DOMRect) -> float:
	"""Overlap area divided by the area of the smaller rectangle, 0 when either is empty."""
	smaller_area = min(a.area, b.area)
	if smaller_area <= 0:
		return 0.0
	return a.intersection_area(b) / smaller_area


def is_fully_contained(inner: DOMRect, outer: DOMRect, threshold: float) -> bool:
	return get_containment_percentage(inner, outer) >= threshold


def coverage(rect: DOMRect, by: DOMRect) -> float:
	"""Share of `rect` covered by `by`"""
	if rect.area <= 0:
		return 0.0
	return rect.intersection_area(by) / rect.area

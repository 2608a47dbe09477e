"""
Shared factories for building DOM trees without a browser.

Every node gets a fresh node_id in creation order; pass `node_id=` where a test depends
on document order.
"""

import itertools
import os

# Keep test output free of the package handler, pytest captures the log records itself
os.environ.setdefault('DEV_BROWSER_SETUP_LOGGING', 'false')

from dev_browser.dom.views import DOMRect, ProcessedNode, RawDOMNode, ScrollInfo

_node_ids = itertools.count(1)

_DEFAULT_BOUNDS = object()


def create_node(
	tag_name: str = 'div',
	attributes: dict | None = None,
	text: str = '',
	children: list | None = None,
	bounds=_DEFAULT_BOUNDS,
	node_id: int | None = None,
	**fields,
) -> RawDOMNode:
	"""Create a RawDOMNode. `bounds` takes a DOMRect, an (x, y, width, height) tuple or None."""
	if bounds is _DEFAULT_BOUNDS:
		bounds = DOMRect(0, 0, 100, 20)
	elif isinstance(bounds, tuple):
		bounds = DOMRect(*bounds)
	node_id = next(_node_ids) if node_id is None else node_id
	return RawDOMNode(
		node_id=node_id,
		backend_node_id=node_id + 1000,
		tag_name=tag_name,
		attributes=attributes or {},
		text=text,
		children=tuple(children or ()),
		bounds=bounds,
		**fields,
	)


def create_document(children: list, width: float = 1280, height: float = 720, page_height: float | None = None) -> RawDOMNode:
	page_height = page_height or height
	return RawDOMNode(
		node_id=0,
		backend_node_id=1,
		tag_name='#document',
		children=tuple(children),
		bounds=DOMRect(0, 0, width, page_height),
		scroll_info=ScrollInfo(
			scroll_left=0,
			scroll_top=0,
			scroll_width=width,
			scroll_height=page_height,
			client_width=width,
			client_height=height,
		),
	)


def to_processed(node: RawDOMNode) -> ProcessedNode:
	"""Wrap a raw tree one to one, as if every node had survived filtering."""
	return ProcessedNode(original_node=node, children=[to_processed(child) for child in node.children])


def tags(node: ProcessedNode | None) -> list[str]:
	"""Tag names of a processed tree in document order, root excluded."""
	if node is None:
		return []
	found = []
	for child in node.children:
		found.append(child.tag_name)
		found.extend(tags(child))
	return found


def find(node: ProcessedNode, tag_name: str) -> ProcessedNode | None:
	for child in node.children:
		if child.tag_name == tag_name:
			return child
		match = find(child, tag_name)
		if match is not None:
			return match
	return None

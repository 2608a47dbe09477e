"""
Conversion of a CDP DOMSnapshot into the RawDOMNode tree consumed by the filter pipeline.

Only the main document is converted: iframe content documents and shadow roots are
not descended into, pseudo elements are skipped.
"""

import logging

from cdp_use.cdp.domsnapshot.commands import CaptureSnapshotReturns
from cdp_use.cdp.domsnapshot.types import DocumentSnapshot, RareBooleanData

from dev_browser.browser.views import PageInfo
from dev_browser.dom.utils import normalize_whitespace
from dev_browser.dom.views import DOMRect, RawDOMNode, ScrollInfo

logger = logging.getLogger(__name__)

# Only the styles we need for visibility, occlusion and interactivity
REQUIRED_COMPUTED_STYLES = [
	'display',
	'visibility',
	'opacity',
	'overflow',
	'overflow-x',
	'overflow-y',
	'cursor',
	'background-color',
	'pointer-events',
	'position',
]

ELEMENT_NODE = 1
TEXT_NODE = 3
DOCUMENT_NODE = 9


def _parse_rare_boolean_data(rare_data: RareBooleanData | None) -> set[int]:
	if not rare_data:
		return set()
	return set(rare_data.get('index', []))


def _parse_computed_styles(strings: list[str], style_indices: list[int]) -> dict[str, str]:
	styles = {}
	for i, style_index in enumerate(style_indices):
		if i < len(REQUIRED_COMPUTED_STYLES) and 0 <= style_index < len(strings):
			styles[REQUIRED_COMPUTED_STYLES[i]] = strings[style_index]
	return styles


def _parse_float(value: str | None, default: float) -> float:
	try:
		return float(value) if value not in (None, '') else default
	except ValueError:
		return default


class _SnapshotTreeBuilder:
	def __init__(self, snapshot: CaptureSnapshotReturns, document: DocumentSnapshot, page_info: PageInfo):
		self.strings: list[str] = snapshot['strings']
		self.page_info = page_info
		self.nodes = document['nodes']
		self.layout = document['layout']
		self.dpr = page_info.device_pixel_ratio or 1.0

		self.node_types: list[int] = self.nodes.get('nodeType', [])
		self.node_names: list[int] = self.nodes.get('nodeName', [])
		self.node_values: list[int] = self.nodes.get('nodeValue', [])
		self.backend_ids: list[int] = self.nodes.get('backendNodeId', [])
		self.attributes: list[list[int]] = self.nodes.get('attributes', [])
		self.clickable = _parse_rare_boolean_data(self.nodes.get('isClickable'))
		self.pseudo = set(self.nodes.get('pseudoType', {}).get('index', []))

		self.children_of: dict[int, list[int]] = {}
		for index, parent_index in enumerate(self.nodes.get('parentIndex', [])):
			if parent_index >= 0:
				self.children_of.setdefault(parent_index, []).append(index)

		# first layout object of each node wins
		self.layout_index_of: dict[int, int] = {}
		for layout_index, node_index in enumerate(self.layout.get('nodeIndex', [])):
			self.layout_index_of.setdefault(node_index, layout_index)

	def string(self, index: int) -> str:
		return self.strings[index] if 0 <= index < len(self.strings) else ''

	def is_element(self, index: int) -> bool:
		return self.node_types[index] == ELEMENT_NODE and index not in self.pseudo

	def tag_name(self, index: int) -> str:
		return self.string(self.node_names[index]).lower()

	def element_children(self, index: int) -> list[int]:
		return [child for child in self.children_of.get(index, []) if self.is_element(child)]

	def _rect(self, key: str, layout_index: int) -> list[float] | None:
		rects = self.layout.get(key) or []
		if layout_index >= len(rects):
			return None
		rect = rects[layout_index]
		return rect if rect and len(rect) >= 4 else None

	def build(self) -> RawDOMNode:
		document_index = next((i for i, t in enumerate(self.node_types) if t == DOCUMENT_NODE), 0)
		children = tuple(
			self._build_element(child, parent_cursor=None, parent_path=(), sibling_tags=self._sibling_tags(document_index))
			for child in self.element_children(document_index)
		)

		info = self.page_info
		root_bounds = DOMRect(
			x=-info.scroll_x,
			y=-info.scroll_y,
			width=max(info.page_width, info.viewport_width),
			height=max(info.page_height, info.viewport_height),
		)
		return RawDOMNode(
			node_id=document_index,
			backend_node_id=self.backend_ids[document_index] if document_index < len(self.backend_ids) else 0,
			tag_name='#document',
			children=children,
			bounds=root_bounds,
			scroll_info=ScrollInfo(
				scroll_left=info.scroll_x,
				scroll_top=info.scroll_y,
				scroll_width=info.page_width,
				scroll_height=info.page_height,
				client_width=info.viewport_width,
				client_height=info.viewport_height,
			),
		)

	def _sibling_tags(self, parent_index: int) -> dict[str, list[int]]:
		tags: dict[str, list[int]] = {}
		for child in self.element_children(parent_index):
			tags.setdefault(self.tag_name(child), []).append(child)
		return tags

	def _build_element(
		self, index: int, parent_cursor: str | None, parent_path: tuple[str, ...], sibling_tags: dict[str, list[int]]
	) -> RawDOMNode:
		tag_name = self.tag_name(index)

		attributes: dict[str, str] = {}
		if index < len(self.attributes):
			pairs = self.attributes[index]
			for i in range(0, len(pairs) - 1, 2):
				attributes[self.string(pairs[i])] = self.string(pairs[i + 1])

		# mirrors the in-page walk: it stops at <body> and at the root element
		if tag_name == 'body' or self.node_types[self._parent(index)] != ELEMENT_NODE:
			selector_path: tuple[str, ...] = ()
		else:
			same_tag = sibling_tags.get(tag_name, [index])
			segment = f'{tag_name}:nth-of-type({same_tag.index(index) + 1})' if len(same_tag) > 1 else tag_name
			selector_path = parent_path + (segment,)

		text_parts = [
			self.string(self.node_values[child])
			for child in self.children_of.get(index, [])
			if self.node_types[child] == TEXT_NODE and child < len(self.node_values)
		]
		text = normalize_whitespace(' '.join(text_parts))

		styles: dict[str, str] = {}
		bounds = None
		paint_order = 0
		scroll_info = None
		layout_index = self.layout_index_of.get(index)
		if layout_index is not None:
			styles = _parse_computed_styles(self.strings, self.layout['styles'][layout_index])
			raw_bounds = self._rect('bounds', layout_index)
			if raw_bounds is not None:
				bounds = DOMRect(
					x=raw_bounds[0] / self.dpr - self.page_info.scroll_x,
					y=raw_bounds[1] / self.dpr - self.page_info.scroll_y,
					width=raw_bounds[2] / self.dpr,
					height=raw_bounds[3] / self.dpr,
				)
			paint_orders = self.layout.get('paintOrders') or []
			if layout_index < len(paint_orders):
				paint_order = paint_orders[layout_index]
			scroll_rect = self._rect('scrollRects', layout_index)
			client_rect = self._rect('clientRects', layout_index)
			if scroll_rect is not None and client_rect is not None:
				scroll_info = ScrollInfo(
					scroll_left=scroll_rect[0] / self.dpr,
					scroll_top=scroll_rect[1] / self.dpr,
					scroll_width=scroll_rect[2] / self.dpr,
					scroll_height=scroll_rect[3] / self.dpr,
					client_width=client_rect[2] / self.dpr,
					client_height=client_rect[3] / self.dpr,
				)

		cursor = styles.get('cursor')
		overflow = styles.get('overflow', 'visible').split()
		child_sibling_tags = self._sibling_tags(index)
		children = tuple(
			self._build_element(child, cursor or parent_cursor, selector_path, child_sibling_tags)
			for child in self.element_children(index)
		)

		return RawDOMNode(
			node_id=index,
			backend_node_id=self.backend_ids[index] if index < len(self.backend_ids) else 0,
			tag_name=tag_name,
			attributes=attributes,
			text=text,
			children=children,
			bounds=bounds,
			paint_order=paint_order,
			display=styles.get('display', ''),
			visibility=styles.get('visibility', 'visible'),
			opacity=_parse_float(styles.get('opacity'), 1.0),
			overflow_x=styles.get('overflow-x', overflow[0] if overflow else 'visible'),
			overflow_y=styles.get('overflow-y', overflow[-1] if overflow else 'visible'),
			position=styles.get('position', 'static'),
			background_color=styles.get('background-color', 'rgba(0, 0, 0, 0)'),
			pointer_events=styles.get('pointer-events', 'auto'),
			cursor_style=cursor if cursor and cursor != parent_cursor else None,
			is_clickable=index in self.clickable,
			scroll_info=scroll_info,
			selector_path=selector_path,
		)

	def _parent(self, index: int) -> int:
		return self.nodes['parentIndex'][index]


def build_raw_dom_tree(snapshot: CaptureSnapshotReturns, page_info: PageInfo) -> RawDOMNode | None:
	"""Build the RawDOMNode tree of the main document, rooted at a synthetic `#document` node.

	Geometry is converted from device pixels in document space to CSS pixels relative to
	the viewport, so that it lines up with `page_info`.
	"""
	documents = snapshot.get('documents') or []
	if not documents:
		logger.debug('DOMSnapshot contains no documents')
		return None

	builder = _SnapshotTreeBuilder(snapshot, documents[0], page_info)
	if not builder.node_types:
		return None
	return builder.build()

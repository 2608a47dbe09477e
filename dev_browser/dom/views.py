from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from dev_browser.config import CONFIG

# Salient attributes, in the order they are printed on an indexed line
SALIENT_ATTRIBUTES = [
	'id',
	'role',
	'name',
	'placeholder',
	'aria-label',
	'type',
]

DOMSelectorMap = dict[int, str]
"""1-based index -> CSS selector valid at extraction time"""

BackendNodeMap = dict[int, int]
"""1-based index -> CDP backendNodeId; indices that failed to resolve are omitted"""


@dataclass(frozen=True, slots=True)
class DOMRect:
	"""Rectangle in CSS pixels, relative to the top-left corner of the viewport"""

	x: float
	y: float
	width: float
	height: float

	@property
	def right(self) -> float:
		return self.x + self.width

	@property
	def bottom(self) -> float:
		return self.y + self.height

	@property
	def area(self) -> float:
		return max(0.0, self.width) * max(0.0, self.height)

	def intersection_area(self, other: 'DOMRect') -> float:
		overlap_width = min(self.right, other.right) - max(self.x, other.x)
		overlap_height = min(self.bottom, other.bottom) - max(self.y, other.y)
		if overlap_width <= 0 or overlap_height <= 0:
			return 0.0
		return overlap_width * overlap_height

	def to_dict(self) -> dict[str, float]:
		return {'x': self.x, 'y': self.y, 'width': self.width, 'height': self.height}


@dataclass(frozen=True, slots=True)
class ScrollInfo:
	"""Scroll state of a scroll container, in CSS pixels"""

	scroll_left: float
	scroll_top: float
	scroll_width: float
	scroll_height: float
	client_width: float
	client_height: float

	@property
	def pixels_above(self) -> float:
		return max(0.0, self.scroll_top)

	@property
	def pixels_below(self) -> float:
		return max(0.0, self.scroll_height - self.client_height - self.scroll_top)

	@property
	def pages_above(self) -> float:
		return self.pixels_above / self.client_height if self.client_height > 0 else 0.0

	@property
	def pages_below(self) -> float:
		return self.pixels_below / self.client_height if self.client_height > 0 else 0.0

	@property
	def vertical_scroll_percentage(self) -> float:
		scrollable = self.scroll_height - self.client_height
		if scrollable <= 0:
			return 0.0
		return min(100.0, max(0.0, self.scroll_top / scrollable * 100))

	@property
	def can_scroll_x(self) -> bool:
		return self.scroll_width > self.client_width + 1

	@property
	def can_scroll_y(self) -> bool:
		return self.scroll_height > self.client_height + 1

	def describe(self) -> str:
		if self.can_scroll_y:
			return f'{self.pages_above:.1f} pages above, {self.pages_below:.1f} pages below'
		horizontal = self.scroll_width - self.client_width
		percentage = self.scroll_left / horizontal * 100 if horizontal > 0 else 0.0
		return f'horizontal {percentage:.0f}%'


SCROLLABLE_OVERFLOW = frozenset({'auto', 'scroll', 'overlay'})


@dataclass(frozen=True, slots=True, eq=False)
class RawDOMNode:
	"""One element of the extracted document, immutable once built.

	`node_id` is the snapshot index and increases in document order. `text` is the
	element's own text (its direct text children), never descendant text.
	"""

	node_id: int
	backend_node_id: int
	tag_name: str
	attributes: dict[str, str] = field(default_factory=dict)
	text: str = ''
	children: tuple['RawDOMNode', ...] = ()
	bounds: DOMRect | None = None
	paint_order: int = 0
	display: str = 'block'
	visibility: str = 'visible'
	opacity: float = 1.0
	overflow_x: str = 'visible'
	overflow_y: str = 'visible'
	position: str = 'static'
	background_color: str = 'rgba(0, 0, 0, 0)'
	pointer_events: str = 'auto'
	# None when the cursor is inherited unchanged from the parent
	cursor_style: str | None = None
	is_clickable: bool = False
	scroll_info: ScrollInfo | None = None
	# body-relative `tag` / `tag:nth-of-type(n)` path of this element in the live document
	selector_path: tuple[str, ...] = ()

	@property
	def is_document(self) -> bool:
		return self.tag_name == '#document'

	@property
	def is_scrollable(self) -> bool:
		if self.scroll_info is None or self.tag_name in ('#document', 'html', 'body'):
			return False
		return (self.overflow_y in SCROLLABLE_OVERFLOW and self.scroll_info.can_scroll_y) or (
			self.overflow_x in SCROLLABLE_OVERFLOW and self.scroll_info.can_scroll_x
		)

	def __repr__(self) -> str:
		return f'<{self.tag_name} node_id={self.node_id} backend_node_id={self.backend_node_id}>'


@dataclass(frozen=True, slots=True, eq=False)
class CompoundComponent:
	"""Several elements acting as one control. Members are references into the raw tree, not copies."""

	kind: str
	root: RawDOMNode
	members: tuple[RawDOMNode, ...]
	primary: RawDOMNode
	member_roles: tuple[str, ...]


@dataclass(slots=True, eq=False)
class ProcessedNode:
	"""A node of a filtered tree. Every filter stage builds a fresh tree of these."""

	original_node: RawDOMNode
	children: list['ProcessedNode'] = field(default_factory=list)
	# text of pruned descendants absorbed by this node
	folded_text: tuple[str, ...] = ()
	compound: CompoundComponent | None = None
	is_compound_member: bool = False

	@property
	def node_id(self) -> int:
		return self.original_node.node_id

	@property
	def backend_node_id(self) -> int:
		return self.original_node.backend_node_id

	@property
	def tag_name(self) -> str:
		return self.original_node.tag_name

	@property
	def attributes(self) -> dict[str, str]:
		return self.original_node.attributes

	@property
	def bounds(self) -> DOMRect | None:
		return self.original_node.bounds

	@property
	def paint_order(self) -> int:
		return self.original_node.paint_order

	@property
	def is_scrollable(self) -> bool:
		return self.original_node.is_scrollable

	@property
	def text(self) -> str:
		"""Own text followed by folded descendant text"""
		parts = [self.original_node.text, *self.folded_text]
		return ' '.join(part for part in parts if part)

	def with_children(self, children: list['ProcessedNode'], **changes: Any) -> 'ProcessedNode':
		return ProcessedNode(
			original_node=self.original_node,
			children=children,
			folded_text=changes.get('folded_text', self.folded_text),
			compound=changes.get('compound', self.compound),
			is_compound_member=changes.get('is_compound_member', self.is_compound_member),
		)


class GetLLMTreeOptions(BaseModel):
	"""Serializer options. Unknown keys are ignored so older callers keep working."""

	model_config = ConfigDict(extra='ignore', frozen=True)

	max_text_length: int = Field(default_factory=lambda: CONFIG.max_text_length, ge=1)
	ellipsis: str = '...'
	include_structural_context: bool = True
	include_compound_annotations: bool = True


class LLMTreeResult(BaseModel):
	tree: str = ''
	selector_map: DOMSelectorMap = Field(default_factory=dict)


class LLMTreeWithBackendIdsResult(LLMTreeResult):
	backend_node_map: BackendNodeMap = Field(default_factory=dict)

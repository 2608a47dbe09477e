import logging
import math
from dataclasses import dataclass

from dev_browser.config import CONFIG
from dev_browser.dom.serializer.clickable_elements import ClickableElementDetector
from dev_browser.dom.views import DOMRect, ProcessedNode, RawDOMNode
from dev_browser.utils import time_execution_sync

logger = logging.getLogger(__name__)

# Never rendered content, dropped with their whole subtree
NON_CONTENT_TAGS = frozenset({'head', 'script', 'style', 'meta', 'link', 'title', 'noscript', 'template'})

CLIPPING_OVERFLOW = frozenset({'hidden', 'clip'})
SCROLLING_OVERFLOW = frozenset({'auto', 'scroll', 'overlay'})

# Native inputs that are commonly styled with opacity: 0 and still operated through a custom skin
OPACITY_EXEMPT_INPUT_TYPES = frozenset({'checkbox', 'radio', 'file'})

MEDIA_TAGS = frozenset({'img', 'svg', 'video', 'canvas', 'picture'})


@dataclass(frozen=True, slots=True)
class ClipRegion:
	left: float = -math.inf
	top: float = -math.inf
	right: float = math.inf
	bottom: float = math.inf

	@classmethod
	def from_rect(cls, rect: DOMRect) -> 'ClipRegion':
		return cls(rect.x, rect.y, rect.right, rect.bottom)

	def intersect(self, other: 'ClipRegion') -> 'ClipRegion':
		return ClipRegion(
			max(self.left, other.left),
			max(self.top, other.top),
			min(self.right, other.right),
			min(self.bottom, other.bottom),
		)

	def intersects(self, rect: DOMRect) -> bool:
		return rect.x < self.right and rect.right > self.left and rect.y < self.bottom and rect.bottom > self.top

	def clip_rect(self, rect: DOMRect) -> DOMRect | None:
		"""Part of `rect` inside the region, None when nothing of it is left."""
		if not self.intersects(rect):
			return None
		left, top = max(self.left, rect.x), max(self.top, rect.y)
		return DOMRect(left, top, min(self.right, rect.right) - left, min(self.bottom, rect.bottom) - top)


def _is_opacity_exempt(node: RawDOMNode) -> bool:
	return node.tag_name == 'input' and node.attributes.get('type', '').lower() in OPACITY_EXEMPT_INPUT_TYPES


def hides_subtree(node: RawDOMNode) -> bool:
	"""Causes of invisibility that no descendant can escape."""
	if node.display == 'none':
		return True
	if node.opacity <= 0 and not _is_opacity_exempt(node):
		return True
	# zero-size clipping box
	if node.bounds is not None and node.bounds.area <= 0:
		if node.overflow_x in CLIPPING_OVERFLOW or node.overflow_y in CLIPPING_OVERFLOW:
			return True
	return False


def is_visible(node: RawDOMNode) -> bool:
	"""Own visibility of a node, ignoring where it sits on the page."""
	if hides_subtree(node):
		return False
	if node.bounds is None or node.bounds.width <= 0 or node.bounds.height <= 0:
		return False
	return node.visibility not in ('hidden', 'collapse')


def is_in_viewport(node: RawDOMNode, clip: ClipRegion) -> bool:
	return node.bounds is not None and clip.intersects(node.bounds)


def clip_for_children(node: RawDOMNode, clip: ClipRegion, include_scrolled_content: bool = True) -> ClipRegion:
	"""Region the descendants of `node` can show up in.

	With `include_scrolled_content`, a scroll container lets through its whole scrollable
	area (content reachable by scrolling counts as present). Without it, only the box
	currently painted on screen.
	"""
	bounds = node.bounds
	if bounds is None:
		return clip

	left, right = -math.inf, math.inf
	top, bottom = -math.inf, math.inf
	scroll = node.scroll_info if include_scrolled_content else None
	if node.overflow_x in CLIPPING_OVERFLOW or (node.overflow_x in SCROLLING_OVERFLOW and not include_scrolled_content):
		left, right = bounds.x, bounds.right
	elif node.overflow_x in SCROLLING_OVERFLOW and scroll is not None:
		left = bounds.x - scroll.scroll_left
		right = left + max(scroll.scroll_width, bounds.width)
	if node.overflow_y in CLIPPING_OVERFLOW or (node.overflow_y in SCROLLING_OVERFLOW and not include_scrolled_content):
		top, bottom = bounds.y, bounds.bottom
	elif node.overflow_y in SCROLLING_OVERFLOW and scroll is not None:
		top = bounds.y - scroll.scroll_top
		bottom = top + max(scroll.scroll_height, bounds.height)
	return clip.intersect(ClipRegion(left, top, right, bottom))


def has_meaningful_content(node: RawDOMNode) -> bool:
	if node.text:
		return True
	if node.tag_name in MEDIA_TAGS and any(node.attributes.get(key, '').strip() for key in ('alt', 'aria-label', 'title')):
		return True
	return node.is_scrollable


class VisibilityFilter:
	"""Drops nodes a user cannot perceive.

	A node that fails its own check (no box, visibility hidden, clipped away) is replaced
	by its surviving children. A node that is visible but carries no text, no interactive
	semantics and no interactive descendants is collapsed the same way.
	"""

	def __init__(self, root: RawDOMNode, viewport_expansion: int | None = None):
		self.root = root
		self.viewport_expansion = CONFIG.viewport_expansion if viewport_expansion is None else viewport_expansion

	def _root_clip(self) -> ClipRegion:
		clip = ClipRegion.from_rect(self.root.bounds) if self.root.bounds is not None else ClipRegion()
		viewport = self.root.scroll_info
		if self.viewport_expansion is not None and viewport is not None:
			expansion = self.viewport_expansion
			clip = clip.intersect(
				ClipRegion(-expansion, -expansion, viewport.client_width + expansion, viewport.client_height + expansion)
			)
		return clip

	@time_execution_sync('--filter_visible_nodes')
	def filter(self) -> ProcessedNode | None:
		root_clip = self._root_clip()
		survivors: list[ProcessedNode] = []
		for child in self.root.children:
			nodes, _ = self._visit(child, root_clip, root_clip)
			survivors.extend(nodes)

		if not survivors:
			logger.debug('No visible nodes on the page')
			return None
		return ProcessedNode(original_node=self.root, children=survivors)

	def _visit(self, node: RawDOMNode, clip: ClipRegion, root_clip: ClipRegion) -> tuple[list[ProcessedNode], bool]:
		"""Return the nodes that replace `node` in the filtered tree, and whether any of them is interactive."""
		if node.tag_name in NON_CONTENT_TAGS or hides_subtree(node):
			return [], False

		own_clip = root_clip if node.position == 'fixed' else clip
		children: list[ProcessedNode] = []
		has_interactive_descendant = False
		# svg internals (path, g, use...) are drawing primitives, not elements a user addresses
		if node.tag_name != 'svg':
			child_clip = clip_for_children(node, own_clip)
			for child in node.children:
				nodes, interactive = self._visit(child, child_clip, root_clip)
				children.extend(nodes)
				has_interactive_descendant = has_interactive_descendant or interactive

		if not (is_visible(node) and is_in_viewport(node, own_clip)):
			return children, has_interactive_descendant

		interactive = ClickableElementDetector.is_interactive(node)
		if interactive or has_interactive_descendant or has_meaningful_content(node):
			return [ProcessedNode(original_node=node, children=children)], interactive or has_interactive_descendant
		return children, False


def filter_visible_nodes(root: RawDOMNode | None, viewport_expansion: int | None = None) -> ProcessedNode | None:
	if root is None:
		return None
	return VisibilityFilter(root, viewport_expansion=viewport_expansion).filter()

import logging
import re

from dev_browser.config import CONFIG
from dev_browser.dom.serializer.visibility import ClipRegion, clip_for_children
from dev_browser.dom.utils import coverage
from dev_browser.dom.views import DOMRect, ProcessedNode, RawDOMNode
from dev_browser.utils import time_execution_sync

logger = logging.getLogger(__name__)

_ALPHA_RE = re.compile(r'^(?:rgba?|hsla?)\((?P<body>[^)]*)\)$')
_COLOR_FUNCTION_RE = re.compile(r'^color\([^)]*/\s*(?P<alpha>[\d.]+%?)\s*\)$')


def _parse_alpha(value: str) -> float:
	value = value.strip()
	if value.endswith('%'):
		return float(value[:-1]) / 100
	return float(value)


def background_alpha(color: str) -> float:
	"""Alpha channel of a computed `background-color` value."""
	color = color.strip().lower()
	if not color or color == 'transparent':
		return 0.0

	try:
		match = _ALPHA_RE.match(color)
		if match:
			body = match.group('body')
			if '/' in body:
				return _parse_alpha(body.split('/')[-1])
			parts = [part for part in re.split(r'[\s,]+', body) if part]
			return _parse_alpha(parts[3]) if len(parts) >= 4 else 1.0

		match = _COLOR_FUNCTION_RE.match(color)
		if match:
			return _parse_alpha(match.group('alpha'))
	except ValueError:
		logger.debug(f'Unparsable background-color {color!r}, treating it as transparent')
		return 0.0

	# color() without alpha, named colors and hex values are opaque
	return 1.0


def is_opaque_element(node: RawDOMNode) -> bool:
	"""Whether `node` paints a solid box that hides whatever is painted under it."""
	if node.bounds is None or node.bounds.area <= 0:
		return False
	if node.display == 'none' or node.visibility in ('hidden', 'collapse'):
		return False
	return node.opacity >= 1 and background_alpha(node.background_color) >= 1


def paints_after(node: RawDOMNode, other: RawDOMNode) -> bool:
	"""Whether `node` is painted on top of `other`. Equal paint order falls back to document order."""
	if node.paint_order != other.paint_order:
		return node.paint_order > other.paint_order
	return node.node_id > other.node_id


def is_occluded_by_paint_order(
	node: RawDOMNode, occluder: RawDOMNode, threshold: float | None = None, occluder_bounds: DOMRect | None = None
) -> bool:
	"""Check if `occluder` hides `node`. Ancestry is the caller's concern.

	`occluder_bounds` is the part of the occluder left visible by its clipping ancestors,
	its full box when not given.
	"""
	occluder_bounds = occluder_bounds or occluder.bounds
	if node is occluder or node.bounds is None or occluder_bounds is None:
		return False
	if not is_opaque_element(occluder) or not paints_after(occluder, node):
		return False
	threshold = CONFIG.occlusion_threshold if threshold is None else threshold
	return coverage(node.bounds, occluder_bounds) >= threshold


def flatten_tree(node: ProcessedNode) -> list[ProcessedNode]:
	"""All nodes of a processed tree in document order."""
	nodes = [node]
	for child in node.children:
		nodes.extend(flatten_tree(child))
	return nodes


class PaintOrderRemover:
	"""
	Removes nodes hidden under an opaque element painted later (a modal, a sticky header...).

	Occluders are taken from the full raw document, so a backdrop that the visibility
	filter collapsed as an empty wrapper still hides what is under it.
	"""

	def __init__(self, root: ProcessedNode, occlusion_threshold: float | None = None):
		self.root = root
		self.threshold = CONFIG.occlusion_threshold if occlusion_threshold is None else occlusion_threshold
		self._ranges: dict[RawDOMNode, tuple[int, int]] = {}
		# occluder and the part of its box its clipping ancestors leave on screen
		self._occluders: list[tuple[RawDOMNode, DOMRect]] = []
		self._removed = 0

	def _index_raw_tree(self, node: RawDOMNode, counter: int, visible_ancestors: bool, clip: ClipRegion) -> int:
		start = counter
		counter += 1
		# opacity and hidden subtrees of ancestors apply to what descendants paint
		visible = visible_ancestors and node.display != 'none' and node.opacity >= 1
		# fixed elements escape the clipping of their ancestors
		own_clip = ClipRegion() if node.position == 'fixed' else clip
		child_clip = clip_for_children(node, own_clip, include_scrolled_content=False)
		for child in node.children:
			counter = self._index_raw_tree(child, counter, visible, child_clip)
		self._ranges[node] = (start, counter)
		if visible and not node.is_document and is_opaque_element(node):
			painted = own_clip.clip_rect(node.bounds)
			if painted is not None and painted.area > 0:
				self._occluders.append((node, painted))
		return counter

	def _is_ancestor(self, node: RawDOMNode, other: RawDOMNode) -> bool:
		if node not in self._ranges or other not in self._ranges:
			return False
		start, end = self._ranges[node]
		other_start, _ = self._ranges[other]
		return start < other_start < end

	def _is_occluded(self, node: RawDOMNode) -> bool:
		if node.bounds is None or node.bounds.area <= 0:
			return False
		minimum_area = node.bounds.area * self.threshold
		for occluder, painted in self._occluders:
			# an element is never hidden by its own descendants
			if painted.area < minimum_area or self._is_ancestor(node, occluder):
				continue
			if is_occluded_by_paint_order(node, occluder, self.threshold, occluder_bounds=painted):
				return True
		return False

	@time_execution_sync('--calculate_paint_order')
	def calculate_paint_order(self) -> ProcessedNode:
		"""Return a new tree without occluded nodes. Their surviving descendants move up to the nearest kept ancestor."""
		self._ranges = {}
		self._occluders = []
		self._removed = 0
		self._index_raw_tree(self.root.original_node, 0, True, ClipRegion())

		children: list[ProcessedNode] = []
		for child in self.root.children:
			children.extend(self._rebuild(child))

		if self._removed:
			logger.debug(f'🎨 Paint order removed {self._removed} occluded nodes')
		return self.root.with_children(children)

	def _rebuild(self, node: ProcessedNode) -> list[ProcessedNode]:
		children: list[ProcessedNode] = []
		for child in node.children:
			children.extend(self._rebuild(child))
		if self._is_occluded(node.original_node):
			self._removed += 1
			return children
		return [node.with_children(children)]


def filter_by_paint_order(root: ProcessedNode, occlusion_threshold: float | None = None) -> ProcessedNode:
	return PaintOrderRemover(root, occlusion_threshold=occlusion_threshold).calculate_paint_order()

import logging
from dataclasses import dataclass, field

from dev_browser.config import CONFIG
from dev_browser.dom.serializer.clickable_elements import ClickableElementDetector
from dev_browser.dom.utils import is_fully_contained
from dev_browser.dom.views import DOMRect, ProcessedNode
from dev_browser.utils import time_execution_sync

logger = logging.getLogger(__name__)

# Descendants that keep their own entry even inside a propagating element
FORM_TAGS = frozenset({'input', 'select', 'textarea', 'label'})


@dataclass(slots=True)
class PropagatingBounds:
	"""Box of the nearest propagating ancestor, and the text its pruned descendants hand up to it."""

	tag: str
	bounds: DOMRect
	folded: list[str] = field(default_factory=list)


def should_exclude_child(node: ProcessedNode, active: PropagatingBounds, threshold: float) -> bool:
	raw = node.original_node
	if raw.bounds is None or not is_fully_contained(raw.bounds, active.bounds, threshold):
		return False

	if raw.tag_name in FORM_TAGS or ClickableElementDetector.is_propagating_element(raw):
		return False
	if raw.attributes.get('aria-label', '').strip():
		return False
	# a control of its own nested in a link or button, not part of its label
	return not ClickableElementDetector.has_explicit_interactivity(raw)


class BoundingBoxFilter:
	"""
	Folds inert descendants into the interactive element that contains them.

	A link or button hands its box down the tree. A descendant that sits (almost) entirely
	inside that box and carries no semantics of its own is pruned: its text is folded into
	the propagating ancestor and its children are examined in its place.
	"""

	def __init__(self, root: ProcessedNode, containment_threshold: float | None = None):
		self.root = root
		self.threshold = CONFIG.containment_threshold if containment_threshold is None else containment_threshold
		self._excluded: list[ProcessedNode] = []

	@time_execution_sync('--filter_by_bbox_propagation')
	def filter(self) -> ProcessedNode:
		self._excluded = []
		children: list[ProcessedNode] = []
		for child in self.root.children:
			children.extend(self._filter_tree_recursive(child, None))
		if self._excluded:
			logger.debug(f'📦 Bounding box propagation folded {len(self._excluded)} nodes')
		return self.root.with_children(children)

	@property
	def excluded_nodes(self) -> list[ProcessedNode]:
		return list(self._excluded)

	def _filter_tree_recursive(self, node: ProcessedNode, active: PropagatingBounds | None) -> list[ProcessedNode]:
		raw = node.original_node
		if active is not None and should_exclude_child(node, active, self.threshold):
			self._excluded.append(node)
			if node.text:
				active.folded.append(node.text)
			pruned_children: list[ProcessedNode] = []
			for child in node.children:
				pruned_children.extend(self._filter_tree_recursive(child, active))
			return pruned_children

		own = None
		if raw.bounds is not None and ClickableElementDetector.is_propagating_element(raw):
			own = PropagatingBounds(tag=raw.tag_name, bounds=raw.bounds)

		children: list[ProcessedNode] = []
		for child in node.children:
			children.extend(self._filter_tree_recursive(child, own or active))

		if own is not None and own.folded:
			return [node.with_children(children, folded_text=node.folded_text + tuple(own.folded))]
		return [node.with_children(children)]


def filter_by_bbox_propagation(root: ProcessedNode, containment_threshold: float | None = None) -> ProcessedNode:
	return BoundingBoxFilter(root, containment_threshold=containment_threshold).filter()


def get_excluded_node_ids(root: ProcessedNode, containment_threshold: float | None = None) -> set[int]:
	"""node_ids that bounding box propagation would prune from `root`"""
	bbox_filter = BoundingBoxFilter(root, containment_threshold=containment_threshold)
	bbox_filter.filter()
	return {node.node_id for node in bbox_filter.excluded_nodes}

"""
Compound component detection.

Each detector is a pure function over a ProcessedNode subtree that answers "is this node
the root of a composite control?". Members are the root plus the parts the detector
recognizes (the field and toggle of a combobox, the input driven by a switch). Other
interactive descendants, such as a link inside a label or the options of an open
listbox, are not members and keep their own index. The primary member is the most
actionable one and is what the selector map points at.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from dev_browser.dom.serializer.clickable_elements import ClickableElementDetector
from dev_browser.dom.views import CompoundComponent, ProcessedNode, RawDOMNode

logger = logging.getLogger(__name__)

TOGGLE_INPUT_TYPES = ('checkbox', 'radio')
TEXT_INPUT_TYPES = ('text', 'search', 'email', 'url', 'tel', 'password', '')
TEXT_FIELD_ROLES = ('textbox', 'searchbox', 'combobox')
# Popups owned by a combobox, their items are controls of their own
POPUP_ROLES = frozenset({'listbox', 'menu', 'tree', 'grid', 'dialog'})


@dataclass(frozen=True, slots=True)
class CompoundMatch:
	kind: str
	root_id: int
	member_ids: tuple[int, ...]
	primary_id: int


Detector = Callable[[ProcessedNode], CompoundMatch | None]


def _role(node: RawDOMNode) -> str:
	return node.attributes.get('role', '').strip().lower()


def _input_type(node: RawDOMNode) -> str:
	return node.attributes.get('type', 'text').lower() if node.tag_name == 'input' else ''


def _interactive_descendants(node: ProcessedNode, stop_roles: frozenset[str] = frozenset()) -> list[RawDOMNode]:
	"""Interactive nodes below `node`, not entering (nor returning) subtrees rooted at one of `stop_roles`."""
	found = []
	for child in node.children:
		if _role(child.original_node) in stop_roles:
			continue
		if ClickableElementDetector.is_interactive(child.original_node):
			found.append(child.original_node)
		found.extend(_interactive_descendants(child, stop_roles))
	return found


def _is_text_field(node: RawDOMNode) -> bool:
	if node.tag_name == 'input':
		return _input_type(node) in TEXT_INPUT_TYPES
	return node.tag_name == 'textarea' or _role(node) in TEXT_FIELD_ROLES


def _is_toggle_input(node: RawDOMNode) -> bool:
	return _input_type(node) in TOGGLE_INPUT_TYPES


def _match(kind: str, node: ProcessedNode, descendants: list[RawDOMNode]) -> CompoundMatch | None:
	if not descendants:
		return None
	members = [node.original_node, *descendants]
	# highest score wins, ties go to the earlier member in document order
	primary = max(members, key=lambda member: (ClickableElementDetector.interactivity_score(member), -members.index(member)))
	return CompoundMatch(
		kind=kind,
		root_id=node.node_id,
		member_ids=tuple(member.node_id for member in members),
		primary_id=primary.node_id,
	)


def detect_combobox(node: ProcessedNode) -> CompoundMatch | None:
	"""Custom select: a role=combobox (or listbox popup) wrapper around a text field and/or toggle button."""
	raw = node.original_node
	is_combobox = _role(raw) == 'combobox' or (
		raw.tag_name in ('div', 'span') and raw.attributes.get('aria-haspopup', '').lower() == 'listbox'
	)
	if not is_combobox or raw.tag_name == 'input':
		return None
	parts = [
		d
		for d in _interactive_descendants(node, POPUP_ROLES)
		if _is_text_field(d) or ClickableElementDetector.implicit_role(d) == 'button'
	]
	return _match('combobox', node, parts)


def detect_spinbutton(node: ProcessedNode) -> CompoundMatch | None:
	"""Number stepper: one numeric field plus increment/decrement buttons."""
	raw = node.original_node
	descendants = _interactive_descendants(node)
	numeric = [d for d in descendants if _input_type(d) == 'number' or _role(d) == 'spinbutton']
	buttons = [d for d in descendants if ClickableElementDetector.implicit_role(d) == 'button']
	if _role(raw) == 'spinbutton':
		parts = [d for d in descendants if d in numeric or d in buttons or _is_text_field(d)]
		return _match('spinbutton', node, parts)
	if raw.tag_name not in ('div', 'span') or ClickableElementDetector.is_interactive(raw):
		return None

	# anything besides the field and its steppers makes this a toolbar, not a stepper
	if len(numeric) != 1 or not buttons or len(numeric) + len(buttons) != len(descendants):
		return None
	return _match('spinbutton', node, descendants)


def detect_switch(node: ProcessedNode) -> CompoundMatch | None:
	"""ARIA switch/checkbox/radio skin wrapping the native input it drives."""
	raw = node.original_node
	if raw.tag_name in ('input', 'label') or _role(raw) not in ('switch', 'checkbox', 'radio'):
		return None
	toggles = [d for d in _interactive_descendants(node) if _is_toggle_input(d)]
	return _match('switch', node, toggles)


def detect_labelled_toggle(node: ProcessedNode) -> CompoundMatch | None:
	"""A <label> wrapping a checkbox or radio. The caption belongs to the label, nested links stay separate controls."""
	if node.tag_name != 'label':
		return None
	toggles = [d for d in _interactive_descendants(node) if _is_toggle_input(d)]
	return _match('labelled_toggle', node, toggles)


DETECTORS: tuple[Detector, ...] = (
	detect_combobox,
	detect_spinbutton,
	detect_switch,
	detect_labelled_toggle,
)


def detect_compound(node: ProcessedNode, detectors: tuple[Detector, ...] = DETECTORS) -> CompoundMatch | None:
	"""First matching detector wins."""
	for detector in detectors:
		match = detector(node)
		if match is not None:
			return match
	return None


class CompoundDetector:
	def __init__(self, root: ProcessedNode, detectors: tuple[Detector, ...] = DETECTORS):
		self.root = root
		self.detectors = detectors
		self.matches: list[CompoundMatch] = []

	def apply(self) -> ProcessedNode:
		"""Return a new tree where each compound root carries its CompoundComponent and members are flagged."""
		self.matches = []
		return self.root.with_children([self._visit(child, None) for child in self.root.children])

	def _visit(self, node: ProcessedNode, member_ids: frozenset[int] | None) -> ProcessedNode:
		"""`member_ids` is None outside of any compound."""
		if member_ids is None:
			match = detect_compound(node, self.detectors)
			if match is not None:
				self.matches.append(match)
				logger.debug(f'🧩 {match.kind} compound at <{node.tag_name}> with {len(match.member_ids)} members')
				# the whole subtree belongs to this compound, it is not examined again
				children = [self._visit(child, frozenset(match.member_ids)) for child in node.children]
				return node.with_children(children, compound=self._build_component(node, match))

		children = [self._visit(child, member_ids) for child in node.children]
		return node.with_children(children, is_compound_member=member_ids is not None and node.node_id in member_ids)

	@staticmethod
	def _build_component(node: ProcessedNode, match: CompoundMatch) -> CompoundComponent:
		by_id = {n.node_id: n for n in _iter_raw(node)}
		members = tuple(by_id[member_id] for member_id in match.member_ids)
		return CompoundComponent(
			kind=match.kind,
			root=node.original_node,
			members=members,
			primary=by_id[match.primary_id],
			member_roles=tuple(ClickableElementDetector.implicit_role(member) for member in members),
		)


def _iter_raw(node: ProcessedNode):
	yield node.original_node
	for child in node.children:
		yield from _iter_raw(child)


def apply_compound_detection(root: ProcessedNode) -> ProcessedNode:
	return CompoundDetector(root).apply()


def get_compound_components(root: ProcessedNode) -> list[CompoundComponent]:
	"""All compound components of a processed tree, in document order."""
	components = []
	if root.compound is not None:
		components.append(root.compound)
	for child in root.children:
		components.extend(get_compound_components(child))
	return components


def has_compound_components(node: ProcessedNode) -> bool:
	return node.compound is not None


def format_compound_annotation(component: CompoundComponent) -> str:
	parts = [f'(role={role},tag={member.tag_name})' for role, member in zip(component.member_roles, component.members)]
	return 'compound_components=' + ','.join(parts)

from dev_browser.dom.views import ProcessedNode, RawDOMNode

INTERACTIVE_TAGS = frozenset({'button', 'input', 'select', 'textarea', 'option', 'summary'})

INTERACTIVE_ROLES = frozenset(
	{
		'button',
		'link',
		'menuitem',
		'menuitemcheckbox',
		'menuitemradio',
		'option',
		'radio',
		'checkbox',
		'switch',
		'tab',
		'slider',
		'spinbutton',
		'combobox',
		'searchbox',
		'textbox',
		'listbox',
		'treeitem',
	}
)

EVENT_HANDLER_ATTRIBUTES = frozenset(
	{'onclick', 'onmousedown', 'onmouseup', 'onkeydown', 'onkeyup', 'onchange', 'oninput', 'ontouchstart'}
)

# (tag, role) pairs whose box is handed down to descendants, None matches any role
PROPAGATING_ELEMENTS = (
	('a', None),
	('button', None),
	('div', 'button'),
	('div', 'combobox'),
	('span', 'button'),
	('span', 'combobox'),
	('input', 'combobox'),
)

NEVER_INTERACTIVE_TAGS = frozenset({'#document', 'html', 'body', 'head'})

_INPUT_ROLES = {
	'checkbox': 'checkbox',
	'radio': 'radio',
	'range': 'slider',
	'number': 'spinbutton',
	'search': 'searchbox',
	'submit': 'button',
	'reset': 'button',
	'button': 'button',
	'image': 'button',
}


class ClickableElementDetector:
	@staticmethod
	def is_disabled(node: RawDOMNode) -> bool:
		return 'disabled' in node.attributes or node.attributes.get('aria-disabled', '').lower() == 'true'

	@staticmethod
	def has_explicit_interactivity(node: RawDOMNode) -> bool:
		"""Interactivity declared in markup: an interactive role, an event handler, contenteditable or a focusable tabindex."""
		attributes = node.attributes
		if attributes.get('role', '').lower() in INTERACTIVE_ROLES:
			return True
		if any(attribute in attributes for attribute in EVENT_HANDLER_ATTRIBUTES):
			return True
		if attributes.get('contenteditable', 'false').lower() in ('', 'true', 'plaintext-only'):
			return True

		tabindex = attributes.get('tabindex')
		if tabindex is not None:
			try:
				return int(tabindex) >= 0
			except ValueError:
				return False
		return False

	@staticmethod
	def is_interactive(node: RawDOMNode) -> bool:
		"""Check if this node is something a user can click, type into or select."""
		tag = node.tag_name
		if tag in NEVER_INTERACTIVE_TAGS:
			return False
		if ClickableElementDetector.is_disabled(node):
			return False
		attributes = node.attributes

		if tag == 'input' and attributes.get('type', '').lower() == 'hidden':
			return False
		if tag in INTERACTIVE_TAGS:
			return True
		if tag == 'a' and 'href' in attributes:
			return True

		if ClickableElementDetector.has_explicit_interactivity(node):
			return True
		if node.is_clickable:
			return True

		# only a cursor set on this element, inherited pointers belong to the ancestor
		return node.cursor_style == 'pointer'

	@staticmethod
	def interactivity_score(node: RawDOMNode) -> int:
		"""Rank how directly actionable a node is. Used to choose the primary member of a compound."""
		if not ClickableElementDetector.is_interactive(node):
			return 0

		tag = node.tag_name
		attributes = node.attributes
		score = 1
		if tag in ('input', 'select', 'textarea'):
			score += 5
		elif tag == 'button':
			score += 4
		elif tag == 'a' and 'href' in attributes:
			score += 3
		if attributes.get('role', '').lower() in INTERACTIVE_ROLES:
			score += 2
		if any(attribute in attributes for attribute in EVENT_HANDLER_ATTRIBUTES):
			score += 2
		if node.is_clickable:
			score += 1
		if node.cursor_style == 'pointer':
			score += 1
		return score

	@staticmethod
	def implicit_role(node: RawDOMNode) -> str:
		role = node.attributes.get('role', '').strip().lower()
		if role:
			return role

		tag = node.tag_name
		if tag == 'a':
			return 'link' if 'href' in node.attributes else 'generic'
		if tag in ('button', 'summary'):
			return 'button'
		if tag == 'input':
			return _INPUT_ROLES.get(node.attributes.get('type', 'text').lower(), 'textbox')
		if tag == 'select':
			return 'listbox' if 'multiple' in node.attributes else 'combobox'
		if tag == 'textarea':
			return 'textbox'
		if tag == 'option':
			return 'option'
		return tag

	@staticmethod
	def is_propagating_element(node: RawDOMNode) -> bool:
		role = node.attributes.get('role', '').lower() or None
		for tag, propagating_role in PROPAGATING_ELEMENTS:
			if node.tag_name == tag and (propagating_role is None or propagating_role == role):
				return True
		return False

	@staticmethod
	def count_interactive_descendants(node: ProcessedNode) -> int:
		count = 0
		for child in node.children:
			if ClickableElementDetector.is_interactive(child.original_node):
				count += 1
			count += ClickableElementDetector.count_interactive_descendants(child)
		return count

	@staticmethod
	def should_make_scrollable_interactive(node: ProcessedNode) -> bool:
		"""Scroll containers get their own index only when nothing inside them is indexable."""
		if not node.is_scrollable or ClickableElementDetector.is_interactive(node.original_node):
			return False
		return ClickableElementDetector.count_interactive_descendants(node) == 0


is_interactive = ClickableElementDetector.is_interactive
get_interactivity_score = ClickableElementDetector.interactivity_score
is_propagating_element = ClickableElementDetector.is_propagating_element
count_interactive_descendants = ClickableElementDetector.count_interactive_descendants
should_make_scrollable_interactive = ClickableElementDetector.should_make_scrollable_interactive

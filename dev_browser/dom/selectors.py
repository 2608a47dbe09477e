"""CSS selector synthesis.

The same algorithm runs in two places: `build_selector` over extracted nodes when the
selector map is built, and `BUILD_SELECTOR_FUNCTION` inside the page when a selector
is rebuilt from a backend node id. Order of preference:

1. `#id`
2. `[data-testid="..."]`
3. `input[name="..."]` / `select[name="..."]` / `textarea[name="..."]`
4. `body > div > button:nth-of-type(2)`, or the bare tag when the walk is empty
"""

import re

from dev_browser.dom.views import RawDOMNode

NAMED_FORM_TAGS = ('input', 'select', 'textarea')

_CSS_SPECIAL_RE = re.compile(r'([!"#$%&\'()*+,./:;<=>?@\[\\\]^`{|}~])')

BUILD_SELECTOR_FUNCTION = r"""function() {
	function escapeSelector(str) {
		return str.replace(/([!"#$%&'()*+,./:;<=>?@[\\\]^`{|}~])/g, '\\$1');
	}

	if (this.id) {
		return '#' + escapeSelector(this.id);
	}

	var testId = this.getAttribute('data-testid');
	if (testId) {
		return '[data-testid="' + escapeSelector(testId) + '"]';
	}

	var tagName = this.tagName.toLowerCase();
	var name = this.getAttribute('name');
	if (name && ['input', 'select', 'textarea'].indexOf(tagName) !== -1) {
		return tagName + '[name="' + escapeSelector(name) + '"]';
	}

	var path = [];
	var el = this;
	while (el && el !== document.body && el.parentElement) {
		var tag = el.tagName.toLowerCase();
		var parent = el.parentElement;
		var siblings = Array.from(parent.children).filter(function(c) {
			return c.tagName.toLowerCase() === tag;
		});
		if (siblings.length > 1) {
			path.unshift(tag + ':nth-of-type(' + (siblings.indexOf(el) + 1) + ')');
		} else {
			path.unshift(tag);
		}
		el = parent;
	}
	return path.length > 0 ? 'body > ' + path.join(' > ') : tagName;
}"""


def escape_selector(value: str) -> str:
	"""Backslash-escape every CSS special character in an identifier value."""
	return _CSS_SPECIAL_RE.sub(r'\\\1', value)


def build_selector(node: RawDOMNode) -> str:
	element_id = node.attributes.get('id')
	if element_id:
		return '#' + escape_selector(element_id)

	test_id = node.attributes.get('data-testid')
	if test_id:
		return f'[data-testid="{escape_selector(test_id)}"]'

	name = node.attributes.get('name')
	if name and node.tag_name in NAMED_FORM_TAGS:
		return f'{node.tag_name}[name="{escape_selector(name)}"]'

	if node.selector_path:
		return 'body > ' + ' > '.join(node.selector_path)
	return node.tag_name

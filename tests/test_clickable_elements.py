"""Tests for interactivity heuristics."""

import pytest

from dev_browser.dom.serializer.clickable_elements import ClickableElementDetector
from dev_browser.dom.views import ScrollInfo
from tests.conftest import create_node, to_processed


class TestIsInteractive:
	@pytest.mark.parametrize(
		'tag_name, attributes',
		[
			('button', {}),
			('input', {'type': 'text'}),
			('select', {}),
			('textarea', {}),
			('a', {'href': '/home'}),
			('summary', {}),
			('div', {'role': 'button'}),
			('span', {'onclick': 'go()'}),
			('div', {'tabindex': '0'}),
			('div', {'contenteditable': 'true'}),
		],
	)
	def test_interactive(self, tag_name, attributes):
		assert ClickableElementDetector.is_interactive(create_node(tag_name, attributes))

	@pytest.mark.parametrize(
		'tag_name, attributes',
		[
			('div', {}),
			('a', {}),
			('input', {'type': 'hidden'}),
			('button', {'disabled': ''}),
			('div', {'role': 'button', 'aria-disabled': 'true'}),
			('div', {'tabindex': '-1'}),
			('div', {'contenteditable': 'false'}),
			('body', {'onclick': 'x()'}),
		],
	)
	def test_not_interactive(self, tag_name, attributes):
		assert not ClickableElementDetector.is_interactive(create_node(tag_name, attributes))

	def test_engine_click_hint(self):
		assert ClickableElementDetector.is_interactive(create_node('div', is_clickable=True))

	def test_only_own_pointer_cursor_counts(self):
		assert ClickableElementDetector.is_interactive(create_node('div', cursor_style='pointer'))
		assert not ClickableElementDetector.is_interactive(create_node('div', cursor_style=None))

	@pytest.mark.parametrize(
		'attributes, expected',
		[
			({'role': 'switch'}, True),
			({'onkeydown': 'go()'}, True),
			({'contenteditable': ''}, True),
			({'tabindex': '0'}, True),
			({'tabindex': '-1'}, False),
			({'tabindex': 'abc'}, False),
			({'role': 'presentation'}, False),
			({}, False),
		],
	)
	def test_explicit_interactivity(self, attributes, expected):
		assert ClickableElementDetector.has_explicit_interactivity(create_node('span', attributes)) is expected


class TestRolesAndScores:
	def test_form_field_outranks_wrapper(self):
		field = create_node('input', {'type': 'text'})
		wrapper = create_node('div', {'role': 'combobox'})
		assert ClickableElementDetector.interactivity_score(field) > ClickableElementDetector.interactivity_score(wrapper)
		assert ClickableElementDetector.interactivity_score(create_node('div')) == 0

	@pytest.mark.parametrize(
		'tag_name, attributes, role',
		[
			('a', {'href': '#'}, 'link'),
			('input', {}, 'textbox'),
			('input', {'type': 'checkbox'}, 'checkbox'),
			('input', {'type': 'number'}, 'spinbutton'),
			('select', {}, 'combobox'),
			('select', {'multiple': ''}, 'listbox'),
			('div', {'role': 'Tab'}, 'tab'),
			('section', {}, 'section'),
		],
	)
	def test_implicit_role(self, tag_name, attributes, role):
		assert ClickableElementDetector.implicit_role(create_node(tag_name, attributes)) == role

	def test_propagating_elements(self):
		assert ClickableElementDetector.is_propagating_element(create_node('a'))
		assert ClickableElementDetector.is_propagating_element(create_node('span', {'role': 'combobox'}))
		assert not ClickableElementDetector.is_propagating_element(create_node('div', {'role': 'tab'}))
		assert not ClickableElementDetector.is_propagating_element(create_node('input'))


class TestScrollableContainers:
	scroll = ScrollInfo(scroll_left=0, scroll_top=0, scroll_width=100, scroll_height=400, client_width=100, client_height=100)

	def test_scrollable_without_interactive_content(self):
		container = create_node('div', overflow_y='auto', scroll_info=self.scroll, children=[create_node('p', text='a')])
		assert ClickableElementDetector.should_make_scrollable_interactive(to_processed(container))

	def test_scrollable_with_interactive_content(self):
		container = create_node('div', overflow_y='auto', scroll_info=self.scroll, children=[create_node('button')])
		processed = to_processed(container)
		assert ClickableElementDetector.count_interactive_descendants(processed) == 1
		assert not ClickableElementDetector.should_make_scrollable_interactive(processed)

	def test_overflow_visible_is_not_scrollable(self):
		container = create_node('div', overflow_y='visible', scroll_info=self.scroll)
		assert not ClickableElementDetector.should_make_scrollable_interactive(to_processed(container))

"""Tests for compound component detectors."""

from dev_browser.dom.serializer.compound import (
	CompoundDetector,
	apply_compound_detection,
	detect_combobox,
	detect_labelled_toggle,
	detect_spinbutton,
	detect_switch,
	format_compound_annotation,
	get_compound_components,
	has_compound_components,
)
from dev_browser.dom.serializer.serializer import serialize_tree
from tests.conftest import create_document, create_node, find, to_processed


def build_combobox():
	field = create_node('input', {'type': 'text', 'aria-autocomplete': 'list'})
	toggle = create_node('button', {'aria-label': 'Open'})
	root = create_node('div', {'role': 'combobox'}, children=[field, toggle])
	return root, field, toggle


class TestDetectors:
	def test_combobox(self):
		root, field, toggle = build_combobox()
		match = detect_combobox(to_processed(root))
		assert match is not None
		assert match.kind == 'combobox'
		assert match.member_ids == (root.node_id, field.node_id, toggle.node_id)
		assert match.primary_id == field.node_id

	def test_combobox_without_interactive_parts_is_not_compound(self):
		root = create_node('div', {'role': 'combobox'}, text='Pick one')
		assert detect_combobox(to_processed(root)) is None

	def test_labelled_toggle(self):
		checkbox = create_node('input', {'type': 'checkbox', 'name': 'terms'})
		label = create_node('label', text='I agree', children=[create_node('span'), checkbox])
		match = detect_labelled_toggle(to_processed(label))
		assert match is not None
		assert match.member_ids == (label.node_id, checkbox.node_id)
		assert match.primary_id == checkbox.node_id

	def test_label_around_text_field_is_not_a_toggle(self):
		label = create_node('label', text='Email', children=[create_node('input', {'type': 'email'})])
		assert detect_labelled_toggle(to_processed(label)) is None

	def test_switch(self):
		native = create_node('input', {'type': 'checkbox'}, opacity=0.0)
		root = create_node('div', {'role': 'switch', 'aria-checked': 'false'}, children=[native])
		match = detect_switch(to_processed(root))
		assert match is not None
		assert match.primary_id == native.node_id

	def test_spinbutton_stepper(self):
		minus = create_node('button', text='-')
		number = create_node('input', {'type': 'number'})
		plus = create_node('button', text='+')
		root = create_node('div', children=[minus, number, plus])
		match = detect_spinbutton(to_processed(root))
		assert match is not None
		assert match.primary_id == number.node_id
		assert len(match.member_ids) == 4

	def test_toolbar_of_buttons_is_not_a_spinbutton(self):
		root = create_node('div', children=[create_node('button', text='Bold'), create_node('button', text='Italic')])
		assert detect_spinbutton(to_processed(root)) is None

	def test_detection_is_deterministic(self):
		root, _, _ = build_combobox()
		processed = to_processed(root)
		assert detect_combobox(processed) == detect_combobox(processed)


class TestCompoundDetector:
	def test_marks_root_and_members(self):
		root, field, toggle = build_combobox()
		result = apply_compound_detection(to_processed(create_document([root])))

		compound_root = result.children[0]
		assert has_compound_components(compound_root)
		assert compound_root.compound.primary is field
		assert compound_root.compound.member_roles == ('combobox', 'textbox', 'button')
		assert [child.is_compound_member for child in compound_root.children] == [True, True]

	def test_members_are_not_examined_again(self):
		field = create_node('input', {'type': 'text'})
		inner_checkbox = create_node('input', {'type': 'checkbox'})
		inner = create_node('div', {'role': 'switch'}, children=[inner_checkbox])
		outer = create_node('div', {'role': 'combobox'}, children=[field, inner])
		detector = CompoundDetector(to_processed(create_document([outer])))
		result = detector.apply()

		assert [match.kind for match in detector.matches] == ['combobox']
		assert find(result, 'div').compound is not None
		assert get_compound_components(result)[0].kind == 'combobox'
		assert len(get_compound_components(result)) == 1

	def test_annotation_format(self):
		root, _, _ = build_combobox()
		result = apply_compound_detection(to_processed(create_document([root])))
		annotation = format_compound_annotation(result.children[0].compound)
		assert annotation == 'compound_components=(role=combobox,tag=div),(role=textbox,tag=input),(role=button,tag=button)'


class TestMembership:
	def test_link_inside_label_is_not_a_member(self):
		checkbox = create_node('input', {'type': 'checkbox', 'id': 'terms'})
		link = create_node('a', {'href': '/terms', 'id': 'terms-link'}, 'terms')
		label = create_node('label', text='I agree to the', children=[checkbox, link])
		match = detect_labelled_toggle(to_processed(label))
		assert match.member_ids == (label.node_id, checkbox.node_id)

		result = serialize_tree(apply_compound_detection(to_processed(create_document([label]))))
		assert result.selector_map == {1: '#terms', 2: '#terms-link'}

	def test_open_listbox_options_keep_their_indices(self):
		field = create_node('input', {'type': 'text', 'id': 'q'})
		options = [create_node('div', {'role': 'option', 'id': f'opt-{i}'}, f'Opt {i}') for i in range(3)]
		listbox = create_node('div', {'role': 'listbox', 'id': 'results'}, children=options)
		root = create_node('div', {'role': 'combobox'}, children=[field, listbox])

		match = detect_combobox(to_processed(root))
		assert match.member_ids == (root.node_id, field.node_id)

		result = serialize_tree(apply_compound_detection(to_processed(create_document([root]))))
		assert result.selector_map == {1: '#q', 2: '#results', 3: '#opt-0', 4: '#opt-1', 5: '#opt-2'}
		assert '[3]<div id="opt-0" role="option">Opt 0</div>' in result.tree

	def test_switch_members_are_the_driven_input(self):
		native = create_node('input', {'type': 'checkbox'})
		help_link = create_node('a', {'href': '/help'}, 'What is this?')
		root = create_node('div', {'role': 'switch'}, children=[native, help_link])
		match = detect_switch(to_processed(root))
		assert match.member_ids == (root.node_id, native.node_id)

	def test_label_around_only_a_link_is_not_compound(self):
		label = create_node('label', text='Read', children=[create_node('a', {'href': '/terms'}, 'terms')])
		assert detect_labelled_toggle(to_processed(label)) is None

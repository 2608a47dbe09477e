"""Tests for occlusion by paint order."""

import pytest

from dev_browser.dom.serializer.paint_order import (
	PaintOrderRemover,
	background_alpha,
	is_occluded_by_paint_order,
	is_opaque_element,
)
from dev_browser.dom.views import DOMRect, ScrollInfo
from tests.conftest import create_document, create_node, tags, to_processed

OPAQUE = 'rgb(255, 255, 255)'


class TestBackgroundAlpha:
	@pytest.mark.parametrize(
		'color, alpha',
		[
			('rgb(255, 255, 255)', 1.0),
			('rgba(0, 0, 0, 0)', 0.0),
			('rgba(0, 0, 0, 0.5)', 0.5),
			('rgb(0 0 0 / 40%)', 0.4),
			('transparent', 0.0),
			('color(srgb 1 1 1 / 0.25)', 0.25),
		],
	)
	def test_parses_computed_colors(self, color, alpha):
		assert background_alpha(color) == pytest.approx(alpha)

	def test_opaque_element_needs_full_opacity_and_background(self):
		assert is_opaque_element(create_node('div', background_color=OPAQUE))
		assert not is_opaque_element(create_node('div', background_color=OPAQUE, opacity=0.9))
		assert not is_opaque_element(create_node('div', background_color='rgba(0, 0, 0, 0.5)'))
		assert not is_opaque_element(create_node('div', background_color=OPAQUE, bounds=None))


class TestOcclusionLaw:
	def test_later_paint_order_wins(self):
		lower = create_node('div', text='Below', background_color=OPAQUE, paint_order=1)
		upper = create_node('div', text='Above', background_color=OPAQUE, paint_order=2)
		assert is_occluded_by_paint_order(lower, upper)
		assert not is_occluded_by_paint_order(upper, lower)

	def test_equal_paint_order_falls_back_to_document_order(self):
		first = create_node('div', background_color=OPAQUE, paint_order=5, node_id=10)
		second = create_node('div', background_color=OPAQUE, paint_order=5, node_id=11)
		assert is_occluded_by_paint_order(first, second)
		assert not is_occluded_by_paint_order(second, first)

	def test_partial_overlap_does_not_occlude(self):
		node = create_node('button', bounds=(0, 0, 100, 20), paint_order=1)
		overlay = create_node('div', bounds=(50, 0, 100, 20), background_color=OPAQUE, paint_order=2)
		assert not is_occluded_by_paint_order(node, overlay)

	def test_threshold_is_tunable(self):
		node = create_node('button', bounds=(0, 0, 100, 20), paint_order=1)
		overlay = create_node('div', bounds=(10, 0, 100, 20), background_color=OPAQUE, paint_order=2)
		assert not is_occluded_by_paint_order(node, overlay, threshold=0.95)
		assert is_occluded_by_paint_order(node, overlay, threshold=0.9)

	def test_translucent_overlay_does_not_occlude(self):
		node = create_node('button', paint_order=1)
		backdrop = create_node('div', background_color='rgba(0, 0, 0, 0.5)', paint_order=2)
		assert not is_occluded_by_paint_order(node, backdrop)


class TestPaintOrderRemover:
	def test_only_the_top_opaque_sibling_survives(self):
		lower = create_node('button', {'id': 'lower'}, 'Lower', background_color=OPAQUE, paint_order=1)
		upper = create_node('button', {'id': 'upper'}, 'Upper', background_color=OPAQUE, paint_order=2)
		result = PaintOrderRemover(to_processed(create_document([lower, upper]))).calculate_paint_order()
		assert [child.attributes['id'] for child in result.children] == ['upper']

	def test_ancestor_is_not_occluded_by_descendant(self):
		child = create_node('button', text='Inner', background_color=OPAQUE, paint_order=2)
		parent = create_node('a', {'href': '/'}, children=[child], background_color=OPAQUE, paint_order=1)
		result = PaintOrderRemover(to_processed(create_document([parent]))).calculate_paint_order()
		assert tags(result) == ['a', 'button']

	def test_modal_overlay_hides_page_but_not_its_content(self):
		behind = create_node('button', text='Behind', bounds=(100, 100, 80, 30), paint_order=1)
		dialog_button = create_node('button', text='OK', bounds=(600, 300, 80, 30), paint_order=5)
		overlay = create_node(
			'div',
			bounds=(0, 0, 1280, 720),
			background_color=OPAQUE,
			position='fixed',
			paint_order=4,
			children=[dialog_button],
		)
		result = PaintOrderRemover(to_processed(create_document([behind, overlay]))).calculate_paint_order()
		assert [node.original_node.text for node in result.children[0].children] == ['OK']
		assert tags(result) == ['div', 'button']

	def test_occluder_outside_processed_tree_still_hides(self):
		behind = create_node('a', {'href': '/x'}, 'Link', bounds=(0, 0, 100, 20), paint_order=1)
		cover = create_node('div', bounds=(0, 0, 200, 200), background_color=OPAQUE, paint_order=3)
		doc = create_document([behind, cover])
		processed = to_processed(doc)
		# the cover was collapsed by the visibility filter as an empty wrapper
		processed.children = [processed.children[0]]
		result = PaintOrderRemover(processed).calculate_paint_order()
		assert result.children == []

	def test_occluded_parent_keeps_visible_children(self):
		peeking = create_node('button', text='Peek', bounds=(0, 400, 100, 20), paint_order=3)
		parent = create_node('section', text='Intro', bounds=(0, 0, 300, 300), paint_order=1, children=[peeking])
		cover = create_node('div', bounds=(0, 0, 300, 300), background_color=OPAQUE, paint_order=2)
		result = PaintOrderRemover(to_processed(create_document([parent, cover]))).calculate_paint_order()
		assert [child.tag_name for child in result.children] == ['button', 'div']

	def test_hidden_occluder_does_not_count(self):
		node = create_node('button', text='Visible', paint_order=1)
		cover = create_node('div', background_color=OPAQUE, paint_order=2, visibility='hidden')
		result = PaintOrderRemover(to_processed(create_document([node, cover]))).calculate_paint_order()
		assert tags(result)[0] == 'button'


class TestClippedOccluders:
	def _page(self, overflow: str, **cover_fields):
		outside = create_node('button', text='Outside', bounds=(400, 300, 80, 30), paint_order=1)
		inside = create_node('button', text='Inside', bounds=(10, 10, 50, 20), paint_order=1)
		cover = create_node('div', bounds=(0, 0, 1280, 720), background_color=OPAQUE, paint_order=3, **cover_fields)
		scroll_info = ScrollInfo(0, 0, 200, 2000, 200, 100) if overflow == 'auto' else None
		frame = create_node(
			'div',
			bounds=(0, 0, 200, 100),
			paint_order=2,
			overflow_x=overflow,
			overflow_y=overflow,
			scroll_info=scroll_info,
			children=[cover],
		)
		return to_processed(create_document([outside, inside, frame]))

	@pytest.mark.parametrize('overflow', ['hidden', 'auto'])
	def test_occluder_only_hides_what_its_container_shows(self, overflow):
		result = PaintOrderRemover(self._page(overflow)).calculate_paint_order()
		assert [child.tag_name for child in result.children] == ['button', 'div']
		assert result.children[0].text == 'Outside'

	def test_fixed_occluder_escapes_its_container(self):
		result = PaintOrderRemover(self._page('hidden', position='fixed')).calculate_paint_order()
		assert [child.tag_name for child in result.children] == ['div']

	def test_explicit_occluder_bounds_are_used(self):
		node = create_node('button', text='Save', bounds=(400, 300, 80, 30), paint_order=1)
		cover = create_node('div', bounds=(0, 0, 1280, 720), background_color=OPAQUE, paint_order=2)
		assert is_occluded_by_paint_order(node, cover)
		assert not is_occluded_by_paint_order(node, cover, occluder_bounds=DOMRect(0, 0, 200, 100))

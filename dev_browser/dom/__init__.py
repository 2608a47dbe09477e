from dev_browser.dom.backend_ids import is_backend_node_id_valid, resolve_backend_ids, resolve_selector_from_backend_id
from dev_browser.dom.enhanced_snapshot import build_raw_dom_tree
from dev_browser.dom.selectors import BUILD_SELECTOR_FUNCTION, build_selector, escape_selector
from dev_browser.dom.serializer.bbox import filter_by_bbox_propagation, get_excluded_node_ids
from dev_browser.dom.serializer.clickable_elements import (
	ClickableElementDetector,
	count_interactive_descendants,
	get_interactivity_score,
	is_interactive,
	is_propagating_element,
	should_make_scrollable_interactive,
)
from dev_browser.dom.serializer.compound import format_compound_annotation, get_compound_components, has_compound_components
from dev_browser.dom.serializer.paint_order import filter_by_paint_order, flatten_tree, is_occluded_by_paint_order, is_opaque_element
from dev_browser.dom.serializer.serializer import (
	assign_indices,
	build_attribute_string,
	build_selector_map,
	get_scroll_info,
	serialize_tree,
)
from dev_browser.dom.serializer.visibility import filter_visible_nodes, has_meaningful_content, is_in_viewport, is_visible
from dev_browser.dom.service import (
	DomService,
	apply_filters,
	extract_dom_tree,
	get_llm_tree,
	get_llm_tree_with_backend_ids,
	process_tree,
	serialize_dom_tree,
)
from dev_browser.dom.utils import get_containment_percentage, is_fully_contained, truncate_text
from dev_browser.dom.views import (
	BackendNodeMap,
	CompoundComponent,
	DOMRect,
	DOMSelectorMap,
	GetLLMTreeOptions,
	LLMTreeResult,
	LLMTreeWithBackendIdsResult,
	ProcessedNode,
	RawDOMNode,
	ScrollInfo,
)

__all__ = [
	'BUILD_SELECTOR_FUNCTION',
	'BackendNodeMap',
	'ClickableElementDetector',
	'CompoundComponent',
	'DOMRect',
	'DOMSelectorMap',
	'DomService',
	'GetLLMTreeOptions',
	'LLMTreeResult',
	'LLMTreeWithBackendIdsResult',
	'ProcessedNode',
	'RawDOMNode',
	'ScrollInfo',
	'apply_filters',
	'assign_indices',
	'build_attribute_string',
	'build_raw_dom_tree',
	'build_selector',
	'build_selector_map',
	'count_interactive_descendants',
	'escape_selector',
	'extract_dom_tree',
	'filter_by_bbox_propagation',
	'filter_by_paint_order',
	'filter_visible_nodes',
	'flatten_tree',
	'format_compound_annotation',
	'get_compound_components',
	'get_containment_percentage',
	'get_excluded_node_ids',
	'get_interactivity_score',
	'get_llm_tree',
	'get_llm_tree_with_backend_ids',
	'get_scroll_info',
	'has_compound_components',
	'has_meaningful_content',
	'is_backend_node_id_valid',
	'is_fully_contained',
	'is_in_viewport',
	'is_interactive',
	'is_occluded_by_paint_order',
	'is_opaque_element',
	'is_propagating_element',
	'is_visible',
	'process_tree',
	'resolve_backend_ids',
	'resolve_selector_from_backend_id',
	'serialize_dom_tree',
	'serialize_tree',
	'should_make_scrollable_interactive',
	'truncate_text',
]

# @file purpose: Serializes filtered DOM trees to the indexed text format read by the LLM

from collections.abc import Mapping
from typing import Any

from dev_browser.dom.selectors import build_selector
from dev_browser.dom.serializer.clickable_elements import ClickableElementDetector
from dev_browser.dom.serializer.compound import format_compound_annotation
from dev_browser.dom.utils import truncate_text
from dev_browser.dom.views import (
	SALIENT_ATTRIBUTES,
	DOMSelectorMap,
	GetLLMTreeOptions,
	LLMTreeResult,
	ProcessedNode,
	RawDOMNode,
	ScrollInfo,
)
from dev_browser.utils import time_execution_sync


def coerce_options(options: GetLLMTreeOptions | Mapping[str, Any] | None) -> GetLLMTreeOptions:
	if options is None:
		return GetLLMTreeOptions()
	if isinstance(options, GetLLMTreeOptions):
		return options
	return GetLLMTreeOptions.model_validate(dict(options))


def should_index(node: ProcessedNode) -> bool:
	"""Compound roots, interactive elements and scroll containers with nothing indexable inside."""
	if node.original_node.is_document or node.is_compound_member:
		return False
	if node.compound is not None:
		return True
	if ClickableElementDetector.is_interactive(node.original_node):
		return True
	return ClickableElementDetector.should_make_scrollable_interactive(node)


def assign_indices(root: ProcessedNode | None) -> dict[ProcessedNode, int]:
	"""1-based indices in depth-first document order. Built fresh for every extraction."""
	indices: dict[ProcessedNode, int] = {}

	def visit(node: ProcessedNode) -> None:
		if should_index(node):
			indices[node] = len(indices) + 1
		for child in node.children:
			visit(child)

	if root is not None:
		visit(root)
	return indices


def selector_target(node: ProcessedNode) -> RawDOMNode:
	"""Element the selector of an indexed node points at: the primary member for compounds."""
	return node.compound.primary if node.compound is not None else node.original_node


def build_selector_map(indices: dict[ProcessedNode, int]) -> DOMSelectorMap:
	ordered = sorted(indices.items(), key=lambda item: item[1])
	return {index: build_selector(selector_target(node)) for node, index in ordered}


def build_attribute_string(node: RawDOMNode, max_length: int, ellipsis: str = '...') -> str:
	attributes = []
	for key in SALIENT_ATTRIBUTES:
		value = node.attributes.get(key, '').strip()
		if value:
			value = truncate_text(value, max_length, ellipsis).replace('"', '&quot;')
			attributes.append(f'{key}="{value}"')
	return ' '.join(attributes)


def get_scroll_info(node: ProcessedNode) -> ScrollInfo | None:
	return node.original_node.scroll_info if node.is_scrollable else None


class DOMTreeSerializer:
	"""Serializes a filtered tree to indexed text plus the selector map for those indices.

	Output, one element per line, children indented by one tab:

		[1]<button id="submit">Submit</button>
		[2]<input placeholder="Search" type="text" />
		|SCROLL|[3]<div role="list" /> (0.0 pages above, 2.5 pages below)
	"""

	def __init__(self, root_node: ProcessedNode | None, options: GetLLMTreeOptions | Mapping[str, Any] | None = None):
		self.root_node = root_node
		self.options = coerce_options(options)
		self._indices: dict[ProcessedNode, int] = {}
		self._selector_map: DOMSelectorMap = {}

	@time_execution_sync('--serialize_dom_tree')
	def serialize(self) -> LLMTreeResult:
		# Reset state
		self._indices = assign_indices(self.root_node)
		self._selector_map = build_selector_map(self._indices)

		if self.root_node is None:
			return LLMTreeResult()

		lines: list[str] = []
		if self.root_node.original_node.is_document:
			for child in self.root_node.children:
				self._serialize_node(child, 0, lines)
		else:
			self._serialize_node(self.root_node, 0, lines)
		return LLMTreeResult(tree='\n'.join(lines), selector_map=dict(self._selector_map))

	def _text(self, node: ProcessedNode) -> str:
		return truncate_text(node.text, self.options.max_text_length, self.options.ellipsis)

	def _serialize_node(self, node: ProcessedNode, depth: int, lines: list[str]) -> None:
		depth_str = depth * '\t'
		next_depth = depth
		index = self._indices.get(node)
		scroll_info = get_scroll_info(node)

		if index is not None:
			lines.append(self._indexed_line(node, index, depth_str, scroll_info))
			next_depth += 1
		elif self.options.include_structural_context:
			if scroll_info is not None:
				line = f'{depth_str}|SCROLL|<{node.tag_name}'
				attributes = build_attribute_string(node.original_node, self.options.max_text_length, self.options.ellipsis)
				if attributes:
					line += f' {attributes}'
				lines.append(f'{line} /> ({scroll_info.describe()})')
				next_depth += 1
				text = self._text(node)
				if text:
					lines.append(f'{depth_str}\t{text}')
			else:
				text = self._text(node)
				if text:
					lines.append(f'{depth_str}{text}')

		for child in node.children:
			self._serialize_node(child, next_depth, lines)

	def _indexed_line(self, node: ProcessedNode, index: int, depth_str: str, scroll_info: ScrollInfo | None) -> str:
		tag = node.tag_name
		scroll_prefix = '|SCROLL|' if scroll_info is not None else ''
		line = f'{depth_str}{scroll_prefix}[{index}]<{tag}'

		attributes = build_attribute_string(node.original_node, self.options.max_text_length, self.options.ellipsis)
		if attributes:
			line += f' {attributes}'
		if node.compound is not None and self.options.include_compound_annotations:
			line += f' {format_compound_annotation(node.compound)}'

		text = self._text(node)
		if text:
			line += f'>{text}</{tag}>'
		else:
			line += ' />'
		if scroll_info is not None:
			line += f' ({scroll_info.describe()})'
		return line


def serialize_tree(root: ProcessedNode | None, options: GetLLMTreeOptions | Mapping[str, Any] | None = None) -> LLMTreeResult:
	return DOMTreeSerializer(root, options).serialize()

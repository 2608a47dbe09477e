import logging
from collections.abc import Mapping
from typing import Any

from cdp_use.cdp.domsnapshot.commands import CaptureSnapshotReturns
from playwright.async_api import BrowserContext, Page

from dev_browser.browser.session import cdp_session, get_page_info
from dev_browser.config import CONFIG, DomConfig
from dev_browser.dom.backend_ids import is_backend_node_id_valid, resolve_backend_ids, resolve_selector_from_backend_id
from dev_browser.dom.enhanced_snapshot import REQUIRED_COMPUTED_STYLES, build_raw_dom_tree
from dev_browser.dom.serializer.bbox import BoundingBoxFilter
from dev_browser.dom.serializer.compound import CompoundDetector
from dev_browser.dom.serializer.paint_order import PaintOrderRemover
from dev_browser.dom.serializer.serializer import DOMTreeSerializer
from dev_browser.dom.serializer.visibility import VisibilityFilter
from dev_browser.dom.views import (
	BackendNodeMap,
	DOMSelectorMap,
	GetLLMTreeOptions,
	LLMTreeResult,
	LLMTreeWithBackendIdsResult,
	ProcessedNode,
	RawDOMNode,
)
from dev_browser.utils import time_execution_async, time_execution_sync

logger = logging.getLogger(__name__)

OptionsLike = GetLLMTreeOptions | Mapping[str, Any] | None


@time_execution_sync('--process_tree')
def process_tree(root: RawDOMNode | None, config: DomConfig | None = None) -> ProcessedNode | None:
	"""Run the filter stages: visibility, paint order, bounding box propagation, compound detection."""
	config = config or CONFIG
	visible = VisibilityFilter(root, viewport_expansion=config.viewport_expansion).filter() if root is not None else None
	if visible is None:
		return None

	painted = PaintOrderRemover(visible, occlusion_threshold=config.occlusion_threshold).calculate_paint_order()
	propagated = BoundingBoxFilter(painted, containment_threshold=config.containment_threshold).filter()
	return CompoundDetector(propagated).apply()


def apply_filters(root: ProcessedNode, config: DomConfig | None = None) -> ProcessedNode:
	"""Paint order and bounding box stages over an already visibility-filtered tree"""
	config = config or CONFIG
	painted = PaintOrderRemover(root, occlusion_threshold=config.occlusion_threshold).calculate_paint_order()
	return BoundingBoxFilter(painted, containment_threshold=config.containment_threshold).filter()


def serialize_dom_tree(root: ProcessedNode | None, options: OptionsLike = None) -> LLMTreeResult:
	return DOMTreeSerializer(root, options).serialize()


class DomService:
	"""
	Extracts the indexed DOM tree of one Playwright page.

	Every call re-extracts from the live page; nothing is cached between calls.
	"""

	def __init__(self, page: Page, context: BrowserContext | None = None, config: DomConfig | None = None):
		self.page = page
		self.context = context or page.context
		self.config = config or CONFIG

	@time_execution_async('--extract_dom_tree')
	async def extract_dom_tree(self) -> RawDOMNode | None:
		async with cdp_session(self.page, self.context) as session:
			page_info = await get_page_info(session)
			snapshot: CaptureSnapshotReturns = await session.send(
				'DOMSnapshot.captureSnapshot',
				{
					'computedStyles': REQUIRED_COMPUTED_STYLES,
					'includePaintOrder': True,
					'includeDOMRects': True,
					'includeBlendedBackgroundColors': False,
					'includeTextColorOpacities': False,
				},
			)

		logger.debug(
			f'📸 Snapshot of {self.page.url}: {len(snapshot.get("documents", []))} documents, '
			f'viewport {page_info.viewport_width:.0f}x{page_info.viewport_height:.0f} @{page_info.device_pixel_ratio}x'
		)
		return build_raw_dom_tree(snapshot, page_info)

	async def get_llm_tree(self, options: OptionsLike = None) -> LLMTreeResult:
		raw_tree = await self.extract_dom_tree()
		processed = process_tree(raw_tree, self.config)
		if processed is None:
			return LLMTreeResult()

		result = serialize_dom_tree(processed, options)
		logger.debug(f'🌳 Serialized {len(result.selector_map)} indexed elements')
		return result

	async def get_llm_tree_with_backend_ids(self, options: OptionsLike = None) -> LLMTreeWithBackendIdsResult:
		result = await self.get_llm_tree(options)
		backend_node_map: BackendNodeMap = {}
		if result.selector_map:
			backend_node_map = await resolve_backend_ids(self.page, self.context, result.selector_map)
		return LLMTreeWithBackendIdsResult(
			tree=result.tree,
			selector_map=result.selector_map,
			backend_node_map=backend_node_map,
		)

	async def resolve_backend_ids(self, selector_map: DOMSelectorMap) -> BackendNodeMap:
		return await resolve_backend_ids(self.page, self.context, selector_map)

	async def resolve_selector_from_backend_id(self, backend_node_id: int) -> str:
		return await resolve_selector_from_backend_id(self.page, self.context, backend_node_id)

	async def is_backend_node_id_valid(self, backend_node_id: int) -> bool:
		return await is_backend_node_id_valid(self.page, self.context, backend_node_id)


async def extract_dom_tree(page: Page, context: BrowserContext | None = None) -> RawDOMNode | None:
	return await DomService(page, context).extract_dom_tree()


async def get_llm_tree(page: Page, options: OptionsLike = None, context: BrowserContext | None = None) -> LLMTreeResult:
	"""Extract the page and serialize it.

	Example:
		result = await get_llm_tree(page)
		# [1]<button id="submit">Submit</button>
		await page.click(result.selector_map[1])
	"""
	return await DomService(page, context).get_llm_tree(options)


async def get_llm_tree_with_backend_ids(
	page: Page, context: BrowserContext | None = None, options: OptionsLike = None
) -> LLMTreeWithBackendIdsResult:
	"""Like `get_llm_tree`, also resolving a backendNodeId for every index so elements can be found again later."""
	return await DomService(page, context).get_llm_tree_with_backend_ids(options)

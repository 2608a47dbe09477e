"""
CDP backend node id resolution.

A backendNodeId stays known to the CDP session after its element is removed from the
document, so it can be stored between script invocations and turned back into a
selector on demand. Each operation opens its own CDP session and always detaches it.
"""

import logging

from playwright.async_api import BrowserContext, Page
from playwright.async_api import Error as PlaywrightError

from dev_browser.browser.session import cdp_session
from dev_browser.dom.selectors import BUILD_SELECTOR_FUNCTION
from dev_browser.dom.views import BackendNodeMap, DOMSelectorMap
from dev_browser.exceptions import SelectorSynthesisError
from dev_browser.utils import time_execution_async

logger = logging.getLogger(__name__)

SELECTOR_OBJECT_GROUP = 'devbrowser-selector'


@time_execution_async('--resolve_backend_ids')
async def resolve_backend_ids(
	page: Page,
	context: BrowserContext | None,
	selector_map: DOMSelectorMap,
) -> BackendNodeMap:
	"""Resolve every selector of `selector_map` to a backendNodeId.

	Selectors that match nothing, or that the CDP query engine cannot parse, are left out
	of the result. The call never fails because of a single selector.
	"""
	backend_node_map: BackendNodeMap = {}
	if not selector_map:
		return backend_node_map

	async with cdp_session(page, context) as session:
		document = await session.send('DOM.getDocument', {'depth': 0})
		root_node_id = document['root']['nodeId']

		for index, selector in selector_map.items():
			try:
				result = await session.send('DOM.querySelector', {'nodeId': root_node_id, 'selector': selector})
				node_id = result.get('nodeId', 0)
				if not node_id:
					logger.debug(f'Selector [{index}] {selector!r} no longer matches an element')
					continue

				described = await session.send('DOM.describeNode', {'nodeId': node_id})
				backend_node_map[index] = described['node']['backendNodeId']
			except PlaywrightError as e:
				# Selector might be invalid for CDP or the element went away mid-call
				logger.debug(f'Could not resolve [{index}] {selector!r}: {type(e).__name__}: {e}')

	if len(backend_node_map) < len(selector_map):
		logger.debug(f'🔗 Resolved {len(backend_node_map)}/{len(selector_map)} selectors to backend node ids')
	return backend_node_map


async def resolve_selector_from_backend_id(page: Page, context: BrowserContext | None, backend_node_id: int) -> str:
	"""Build a fresh CSS selector for the element behind `backend_node_id`.

	Raises:
		SelectorSynthesisError: the id is unknown to the session or the in-page function failed.
	"""
	async with cdp_session(page, context) as session:
		try:
			resolved = await session.send(
				'DOM.resolveNode', {'backendNodeId': backend_node_id, 'objectGroup': SELECTOR_OBJECT_GROUP}
			)
		except PlaywrightError as e:
			raise SelectorSynthesisError(backend_node_id, str(e)) from e

		object_id = resolved.get('object', {}).get('objectId')
		if not object_id:
			raise SelectorSynthesisError(backend_node_id, 'could not resolve node to object')

		try:
			result = await session.send(
				'Runtime.callFunctionOn',
				{
					'objectId': object_id,
					'functionDeclaration': BUILD_SELECTOR_FUNCTION,
					'returnByValue': True,
				},
			)
		except PlaywrightError as e:
			raise SelectorSynthesisError(backend_node_id, str(e)) from e
		finally:
			try:
				await session.send('Runtime.releaseObjectGroup', {'objectGroup': SELECTOR_OBJECT_GROUP})
			except PlaywrightError as e:
				# the session detaches right after, which drops the group anyway
				logger.debug(f'Releasing object group {SELECTOR_OBJECT_GROUP!r} failed: {type(e).__name__}: {e}')

		if 'exceptionDetails' in result:
			raise SelectorSynthesisError(backend_node_id, f'failed to build selector: {result["exceptionDetails"].get("text")}')

		return result['result']['value']


async def is_backend_node_id_valid(page: Page, context: BrowserContext | None, backend_node_id: int) -> bool:
	"""True while the session still knows `backend_node_id`, even after its element was removed from the page."""
	try:
		async with cdp_session(page, context) as session:
			await session.send('DOM.resolveNode', {'backendNodeId': backend_node_id})
		return True
	except PlaywrightError as e:
		logger.debug(f'backendNodeId {backend_node_id} is not valid: {e}')
		return False

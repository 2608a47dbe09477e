import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from playwright.async_api import BrowserContext, CDPSession, Page
from playwright.async_api import Error as PlaywrightError

from dev_browser.browser.views import PageInfo

logger = logging.getLogger(__name__)


@asynccontextmanager
async def cdp_session(page: Page, context: BrowserContext | None = None) -> AsyncIterator[CDPSession]:
	"""Open a dedicated CDP session bound to `page` and always detach it on exit."""
	session = await (context or page.context).new_cdp_session(page)
	try:
		yield session
	finally:
		try:
			await session.detach()
		except PlaywrightError as e:
			# the target is already gone (page closed mid-call), nothing left to release
			logger.debug(f'CDP session detach failed: {type(e).__name__}: {e}')


async def get_page_info(session: CDPSession) -> PageInfo:
	"""Read viewport size, device pixel ratio and scroll offsets from Page.getLayoutMetrics."""
	metrics: dict[str, Any] = await session.send('Page.getLayoutMetrics')

	visual_viewport = metrics.get('visualViewport', {})
	# Use CSS pixels (what JavaScript sees) instead of device pixels
	css_visual_viewport = metrics.get('cssVisualViewport', {})
	css_layout_viewport = metrics.get('cssLayoutViewport', {})
	css_content_size = metrics.get('cssContentSize', metrics.get('contentSize', {}))

	width = css_visual_viewport.get('clientWidth', css_layout_viewport.get('clientWidth', 1280.0))
	height = css_visual_viewport.get('clientHeight', css_layout_viewport.get('clientHeight', 720.0))

	device_width = visual_viewport.get('clientWidth', width)
	css_width = css_visual_viewport.get('clientWidth', width)
	device_pixel_ratio = device_width / css_width if css_width > 0 else 1.0

	return PageInfo(
		viewport_width=float(width),
		viewport_height=float(height),
		page_width=float(css_content_size.get('width', width)),
		page_height=float(css_content_size.get('height', height)),
		scroll_x=float(css_visual_viewport.get('pageX', 0)),
		scroll_y=float(css_visual_viewport.get('pageY', 0)),
		device_pixel_ratio=float(device_pixel_ratio) or 1.0,
	)

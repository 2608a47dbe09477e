"""
Browser fixtures for the integration tests.

Each test gets its own headless Chromium so CDP state never leaks between tests. Tests are
skipped when no Chromium build is installed (run `playwright install chromium`).
"""

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright
from pytest_httpserver import HTTPServer


@pytest.fixture(scope='function')
async def browser():
	async with async_playwright() as playwright:
		try:
			browser = await playwright.chromium.launch(headless=True)
		except PlaywrightError as e:
			pytest.skip(f'Chromium is not available: {e}')
		yield browser
		await browser.close()


@pytest.fixture(scope='function')
async def context(browser):
	context = await browser.new_context(viewport={'width': 1280, 'height': 720})
	yield context
	await context.close()


@pytest.fixture(scope='function')
async def page(context):
	return await context.new_page()


@pytest.fixture(scope='session')
def http_server():
	"""Serve a long page so scrolling and viewport clipping can be checked against a real URL."""
	server = HTTPServer()
	server.start()

	rows = '\n'.join(f'<p style="height: 100px; margin: 0">Row {i}</p>' for i in range(30))
	server.expect_request('/long').respond_with_data(
		f"""
		<html>
		<head><title>Long page</title></head>
		<body style="margin: 0">
			<button id="top">Top</button>
			{rows}
			<button id="bottom">Bottom</button>
		</body>
		</html>
		""",
		content_type='text/html',
	)

	yield server
	server.stop()


@pytest.fixture(scope='session')
def base_url(http_server):
	return f'http://{http_server.host}:{http_server.port}'

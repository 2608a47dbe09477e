# @file purpose: Interactive script to print the indexed DOM tree and backend node ids of any URL

import argparse
import asyncio
import json
import logging

from playwright.async_api import async_playwright

from dev_browser.dom.service import DomService
from dev_browser.logging_config import setup_logging

logger = logging.getLogger(__name__)


def print_section_header(title: str, char: str = '=', width: int = 80):
	"""Print a formatted section header for better log organization."""
	print(f'\n{char * width}')
	print(f'{title:^{width}}')
	print(f'{char * width}')


async def show_tree(url: str, headless: bool = True, check_ids: bool = False) -> None:
	async with async_playwright() as playwright:
		browser = await playwright.chromium.launch(headless=headless)
		try:
			context = await browser.new_context(viewport={'width': 1280, 'height': 900})
			page = await context.new_page()
			await page.goto(url, wait_until='domcontentloaded')

			dom_service = DomService(page, context)
			result = await dom_service.get_llm_tree_with_backend_ids()

			print_section_header(f'🌳 TREE: {url}')
			print(result.tree or '(no visible elements)')

			print_section_header('🎯 SELECTOR MAP')
			print(json.dumps(result.model_dump(mode='json')['selector_map'], indent=2))

			print_section_header('🔗 BACKEND NODE IDS')
			print(json.dumps(result.model_dump(mode='json')['backend_node_map'], indent=2))

			if check_ids:
				print_section_header('♻️ SELECTORS REBUILT FROM BACKEND NODE IDS')
				for index, backend_node_id in result.backend_node_map.items():
					selector = await dom_service.resolve_selector_from_backend_id(backend_node_id)
					marker = '✅' if selector == result.selector_map[index] else '🔀'
					print(f'{marker} [{index}] {backend_node_id} -> {selector}')
		finally:
			await browser.close()


def main() -> None:
	parser = argparse.ArgumentParser(description='Print the indexed DOM tree of a web page')
	parser.add_argument('url')
	parser.add_argument('--headful', action='store_true', help='show the browser window')
	parser.add_argument('--check-ids', action='store_true', help='rebuild every selector from its backend node id')
	parser.add_argument('--debug', action='store_true')
	args = parser.parse_args()

	setup_logging('debug' if args.debug else None, force_setup=True)
	asyncio.run(show_tree(args.url, headless=not args.headful, check_ids=args.check_ids))


if __name__ == '__main__':
	main()

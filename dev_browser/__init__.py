from dev_browser.config import CONFIG
from dev_browser.logging_config import setup_logging

# Embedding applications can opt out and configure logging themselves
if CONFIG.setup_logging:
	logger = setup_logging()

from dev_browser.dom.service import DomService, get_llm_tree, get_llm_tree_with_backend_ids
from dev_browser.dom.views import GetLLMTreeOptions, LLMTreeResult, LLMTreeWithBackendIdsResult
from dev_browser.exceptions import SelectorSynthesisError

__all__ = [
	'DomService',
	'GetLLMTreeOptions',
	'LLMTreeResult',
	'LLMTreeWithBackendIdsResult',
	'SelectorSynthesisError',
	'get_llm_tree',
	'get_llm_tree_with_backend_ids',
]

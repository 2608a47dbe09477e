from dev_browser.browser.session import cdp_session, get_page_info
from dev_browser.browser.views import PageInfo

__all__ = ['PageInfo', 'cdp_session', 'get_page_info']

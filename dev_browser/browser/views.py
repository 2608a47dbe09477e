from pydantic import BaseModel, ConfigDict


class PageInfo(BaseModel):
	"""Viewport, page size and scroll information in CSS pixels"""

	model_config = ConfigDict(extra='forbid', frozen=True)

	# Current viewport dimensions
	viewport_width: float
	viewport_height: float

	# Total page dimensions
	page_width: float
	page_height: float

	# Current scroll position
	scroll_x: float = 0.0
	scroll_y: float = 0.0

	# Device pixels per CSS pixel, snapshot geometry is reported in device pixels
	device_pixel_ratio: float = 1.0

	@property
	def pixels_above(self) -> float:
		return self.scroll_y

	@property
	def pixels_below(self) -> float:
		return max(0.0, self.page_height - self.viewport_height - self.scroll_y)

class SelectorSynthesisError(RuntimeError):
	"""Raised when a backend node id can no longer be turned into a CSS selector."""

	def __init__(self, backend_node_id: int, message: str):
		self.backend_node_id = backend_node_id
		super().__init__(f'Could not build selector for backendNodeId {backend_node_id}: {message}')

class InvalidScenarioError(Exception):
    """Scenario document failed validation."""
    def __init__(self, message="Unable to validate scenario data."):
        super().__init__(message)


class NodeNotFoundError(Exception):
    """Node ID not found in the scenario or simulation."""
    def __init__(self, message="Node ID not found."):
        super().__init__(message)


class InvalidCanvasError(Exception):
    """Canvas dimensions cannot host a simulation."""
    def __init__(self, message="Canvas width and height must be positive."):
        super().__init__(message)

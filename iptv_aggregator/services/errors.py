class AggregationError(RuntimeError):
    """Raised when an aggregation run cannot proceed"""
    pass


class RunInProgressError(RuntimeError):
    """Raised when a run is requested while another one is executing"""
    pass

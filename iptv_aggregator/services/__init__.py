"""
Services package for IPTV Aggregator

This package contains all business logic and service layer components.
"""
from iptv_aggregator.services.aggregation_service import run_aggregation
from iptv_aggregator.services.config_validator_service import validate_source_configs
from iptv_aggregator.services.run_coordinator import get_run_coordinator
from iptv_aggregator.services.scheduler_service import update_scheduler

__all__ = [
    'run_aggregation',
    'validate_source_configs',
    'get_run_coordinator',
    'update_scheduler',
]

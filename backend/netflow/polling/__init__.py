"""Poll cycle, SNMP simulation and scheduling."""

from netflow.polling.poller import run_poll_cycle
from netflow.polling.scheduler import poll_topology, scheduler
from netflow.polling.simulator import (
    SimulatedSample,
    address_seed,
    baseline_load,
    link_health,
    simulate_sample,
)

__all__ = [
    # Poll cycle
    "run_poll_cycle",
    # Scheduler
    "scheduler",
    "poll_topology",
    # Simulation
    "SimulatedSample",
    "address_seed",
    "baseline_load",
    "link_health",
    "simulate_sample",
]

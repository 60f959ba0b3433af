"""Background execution of simulation requests."""

from .simulation_worker import SimulationWorker, execute_message

__all__ = ["SimulationWorker", "execute_message"]

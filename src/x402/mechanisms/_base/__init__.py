"""
Base mechanism interfaces
"""

from x402.mechanisms._base.client import ClientMechanism
from x402.mechanisms._base.facilitator import FacilitatorMechanism
from x402.mechanisms._base.server import ServerMechanism

__all__ = ["ClientMechanism", "FacilitatorMechanism", "ServerMechanism"]

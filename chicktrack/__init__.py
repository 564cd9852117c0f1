"""ChickTrack farm-management API: password login with phone OTP step-up."""

__version__ = "1.0.0"

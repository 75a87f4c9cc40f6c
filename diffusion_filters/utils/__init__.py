"""Support helpers for diffusion_filters."""

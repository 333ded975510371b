"""Shared configuration, telemetry and storage providers."""

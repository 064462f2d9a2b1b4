"""Service-layer helpers for catalog display and Billetweb availability sync."""

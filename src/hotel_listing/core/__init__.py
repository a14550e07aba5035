"""Cross-cutting helpers: logging setup and timers."""

"""Transport-agnostic core: errors, ports, notifications and the task session."""

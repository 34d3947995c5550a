"""Run orchestration: planning, task queue and page generation."""

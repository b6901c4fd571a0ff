"""Report orchestration. Run with `python -m wine_eda.pipeline.main`."""

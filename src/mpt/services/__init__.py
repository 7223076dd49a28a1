"""Application services: catalogs, classifiers, stages, prompts, streaming and orchestration."""

"""Protocol front-ends for the engine: UCI and a REST API."""

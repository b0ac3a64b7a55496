"""
Plan engine server runner.
Usage: python -m plan_engine.run_server
"""


def main():
    import uvicorn
    from main import create_app_from_env

    from plan_engine.config import PlanEngineConfig

    app = create_app_from_env()
    config = PlanEngineConfig.from_env()

    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()

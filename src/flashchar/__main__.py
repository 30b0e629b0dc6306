from flashchar.interface.cli import app

if __name__ == "__main__":
    app()

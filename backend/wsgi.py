from bhejo import create_app

app = create_app()

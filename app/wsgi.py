from app.wowbato import create_app

app = create_app()

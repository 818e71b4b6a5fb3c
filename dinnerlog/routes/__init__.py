# Blueprints are registered in dinnerlog.create_app

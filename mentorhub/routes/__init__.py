"""HTTP blueprints, one per entity; registered by mentorhub.create_app"""

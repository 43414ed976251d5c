from django.apps import AppConfig


class GenealogyConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'bizbox.genealogy'

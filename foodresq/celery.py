import os
from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'foodresq.settings')

app = Celery('foodresq')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()

app.conf.beat_schedule = {
    'mark-spoiled-food-every-2-minutes': {
        'task': 'food.tasks.mark_spoiled_listings',
        'schedule': 120.0,
    },
}

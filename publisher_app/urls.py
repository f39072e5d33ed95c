from django.urls import path

from . import views

app_name = 'publisher_app'

urlpatterns = [
    path('hooks/harp/gh-pages/<path:branch>', views.pages_hook, name='pages_hook'),
]

from django.urls import path, include

urlpatterns = [
    path('_api/', include('publisher_app.urls', namespace='publisher_app')),
]

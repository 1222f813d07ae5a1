from django.urls import path
from . import views

app_name = 'access'

urlpatterns = [
    # POST /api/camp/access/authorize/ - PIN/NFC check, returns single-use token
    path('authorize/', views.authorize, name='authorize'),
]

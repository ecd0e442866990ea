from django.urls import path

from . import views

app_name = 'menu'

urlpatterns = [
    path('', views.DayMenuView.as_view(), name='day-menu'),
]

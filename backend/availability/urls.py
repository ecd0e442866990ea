from django.urls import path

from . import views

app_name = 'availability'

urlpatterns = [
    path('', views.OrderWindowStatusView.as_view(), name='status'),
    path('calendar/', views.ServiceCalendarView.as_view(), name='calendar'),
]

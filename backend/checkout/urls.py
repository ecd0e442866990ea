from django.urls import path

from . import views

app_name = 'checkout'

urlpatterns = [
    path('handoff/', views.CheckoutHandoffView.as_view(), name='handoff'),
    path('summary/', views.OrderSummaryView.as_view(), name='summary'),
    path('validate-coupon/', views.ValidateCouponView.as_view(), name='validate-coupon'),
    path('payment-intent/', views.PaymentIntentView.as_view(), name='payment-intent'),
    path('complete/', views.CompleteOrderView.as_view(), name='complete'),
    path('profile/', views.GuestProfileView.as_view(), name='profile'),
]

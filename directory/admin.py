"""
Django admin registrations for the directory models.

Verification of hospitals and ambulance owners is a staff decision made
here: there is no API endpoint that sets ``is_verified``.  Password
hashes are shown read-only and never edited through the admin.
"""

from django.contrib import admin

from .models import (
    AmbulanceOwner,
    AmbulanceVehicle,
    BedCategory,
    BloodStock,
    Doctor,
    Donor,
    Hospital,
    HospitalServiceProfile,
    MedicalService,
)


@admin.action(description='Mark selected as verified')
def mark_verified(modeladmin, request, queryset):
    queryset.update(is_verified=True)


@admin.register(Donor)
class DonorAdmin(admin.ModelAdmin):
    list_display = ('name', 'blood_group', 'city', 'is_active', 'created_at')
    list_filter = ('blood_group', 'is_active')
    search_fields = ('name', 'email', 'phone', 'city', 'postcode')
    readonly_fields = ('password',)


@admin.register(Hospital)
class HospitalAdmin(admin.ModelAdmin):
    list_display = ('hospital_name', 'city', 'is_verified', 'is_active', 'created_at')
    list_filter = ('is_verified', 'is_active')
    search_fields = ('hospital_name', 'email', 'phone', 'city', 'postcode')
    readonly_fields = ('password',)
    actions = [mark_verified]


class AmbulanceVehicleInline(admin.TabularInline):
    model = AmbulanceVehicle
    extra = 0
    fields = ('vehicle_number', 'model', 'year', 'driver_name', 'is_active', 'is_available')


@admin.register(AmbulanceOwner)
class AmbulanceOwnerAdmin(admin.ModelAdmin):
    list_display = ('owner_name', 'city', 'is_verified', 'is_active', 'created_at')
    list_filter = ('is_verified', 'is_active')
    search_fields = ('owner_name', 'email', 'phone', 'city')
    readonly_fields = ('password',)
    inlines = [AmbulanceVehicleInline]
    actions = [mark_verified]


@admin.register(AmbulanceVehicle)
class AmbulanceVehicleAdmin(admin.ModelAdmin):
    list_display = ('vehicle_number', 'owner', 'model', 'year', 'is_active', 'is_available')
    list_filter = ('is_active', 'is_available')
    search_fields = ('vehicle_number', 'driver_name', 'owner__owner_name')


class DoctorInline(admin.TabularInline):
    model = Doctor
    extra = 0


class MedicalServiceInline(admin.TabularInline):
    model = MedicalService
    extra = 0


class BedCategoryInline(admin.TabularInline):
    model = BedCategory
    extra = 0


class BloodStockInline(admin.TabularInline):
    model = BloodStock
    extra = 0


@admin.register(HospitalServiceProfile)
class HospitalServiceProfileAdmin(admin.ModelAdmin):
    list_display = ('hospital', 'updated_at')
    search_fields = ('hospital__hospital_name',)
    inlines = [DoctorInline, MedicalServiceInline, BedCategoryInline, BloodStockInline]

"""
Bookings app: rooms, guests, bookings and the room transaction ledger.

This app owns the financial state of a guest's stay:

- Booking: running totals (charges, payments, balance) and the derived
  payment status, mutated only through add_charge / add_payment
- Transaction: append-only room-scoped ledger lines used to recompute a
  room's balance independently of the booking totals
- Room / Guest: the parties a booking links together

Related apps:
    - payments: Payment records and the routing/refund services that apply
      settled money movements to a Booking through bookings.ledger.services

Usage:
    from bookings.ledger.services import booking_ledger
    from bookings.services import RoomBalanceService

    booking_ledger.apply_charge(booking.id, Decimal("200.00"), description="Rent")
    balance = RoomBalanceService.get_room_balance(room.id)
"""

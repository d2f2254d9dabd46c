"""TicketDesk domain engine: seat maps, booking rules and sales reporting."""

"""
Streamlit pages for Sleft Signals (referral snapshot, strategy briefs,
discovery chat, network hub, system overview).

Each page is run by Streamlit directly and puts the project root on sys.path
itself; nothing here is imported at runtime.
"""
